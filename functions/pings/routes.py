"""
Route table and dispatch shared by the FastAPI app and the API Gateway adapter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from pings.config import Settings
from pings.dependencies import Gateways
from pings.handlers import HANDLER_CLASSES, BaseHandler, HandlerRequest
from pings.responses import HandlerResponse, MethodNotAllowed, NotFound


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    handler: str
    operation: str

    def pattern(self) -> re.Pattern:
        regex = re.sub(r"\{(\w+)\}", r"(?P<\1>[^/]+)", self.path)
        return re.compile(regex)


ROUTES = (
    Route("POST", "/checkin", "checkin", "create"),
    Route("GET", "/family", "family", "status"),
    Route("POST", "/family", "family", "update_membership"),
    Route("POST", "/medications", "medications", "log"),
    Route("POST", "/photos", "photos", "create_upload"),
    Route("GET", "/photos", "photos", "get_photo"),
    Route("DELETE", "/photos", "photos", "delete_photo"),
    Route("GET", "/photos/{photoId}", "photos", "get_photo"),
    Route("DELETE", "/photos/{photoId}", "photos", "delete_photo"),
    Route("POST", "/notifications", "notifications", "dispatch"),
)


class Dispatcher:
    """Holds one handler instance per resource and resolves routes to them."""

    def __init__(self, settings: Settings, gateways: Gateways, routes=ROUTES):
        self.settings = settings
        self.routes = tuple(routes)
        self.handlers: dict[str, BaseHandler] = {
            name: cls(settings, gateways) for name, cls in HANDLER_CLASSES.items()
        }
        self._compiled = [(route, route.pattern()) for route in self.routes]

    def resolve(self, method: str, path: str) -> tuple[Route, dict]:
        """
        Match (method, path) against the table. Raises MethodNotAllowed when
        the path exists under another method and NotFound otherwise.
        """
        path = path.rstrip("/") or "/"
        path_known = False
        for route, pattern in self._compiled:
            match = pattern.fullmatch(path)
            if match is None:
                continue
            if route.method == method.upper():
                return route, match.groupdict()
            path_known = True
        if path_known:
            raise MethodNotAllowed()
        raise NotFound()

    def dispatch(self, route: Route, request: HandlerRequest) -> HandlerResponse:
        return self.handlers[route.handler].handle(route.operation, request)


def _make_endpoint(dispatcher: Dispatcher, route: Route):
    async def endpoint(request: Request) -> JSONResponse:
        handler_request = HandlerRequest(
            method=request.method,
            raw_body=await request.body(),
            query=dict(request.query_params),
            path_params=dict(request.path_params),
        )
        response = await run_in_threadpool(
            dispatcher.dispatch, route, handler_request
        )
        return JSONResponse(status_code=response.status_code, content=response.body)

    return endpoint


def create_router(dispatcher: Dispatcher) -> APIRouter:
    router = APIRouter()
    for route in dispatcher.routes:
        router.add_api_route(
            route.path,
            _make_endpoint(dispatcher, route),
            methods=[route.method],
            name=f"{route.handler}_{route.operation}",
        )

    @router.get("/health")
    def health():
        return {"status": "ok"}

    return router
