"""
FastAPI application entry point.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pings.config import Settings, get_settings
from pings.dependencies import Gateways, get_gateways
from pings.responses import MethodNotAllowed, NotFound
from pings.routes import Dispatcher, create_router

_HTTP_MESSAGES = {
    404: NotFound.default_message,
    405: MethodNotAllowed.default_message,
}


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render routing errors in the same {"error": ...} shape as the handlers."""
    message = _HTTP_MESSAGES.get(exc.status_code, str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    settings: Optional[Settings] = None, gateways: Optional[Gateways] = None
) -> FastAPI:
    settings = settings or get_settings()
    gateways = gateways or get_gateways()
    logging.basicConfig(level=settings.log_level)

    dispatcher = Dispatcher(settings, gateways)
    app = FastAPI(title="Pings Backend (FastAPI)", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(create_router(dispatcher), prefix=settings.api_prefix)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.state.dispatcher = dispatcher
    return app


app = create_app()
