"""
Resource handlers, one per API resource.
"""

from pings.handlers.base import BaseHandler, HandlerRequest
from pings.handlers.checkin import CheckinHandler
from pings.handlers.family import FamilyHandler
from pings.handlers.medications import MedicationsHandler
from pings.handlers.notifications import NotificationsHandler
from pings.handlers.photos import PhotosHandler

HANDLER_CLASSES = {
    cls.name: cls
    for cls in (
        CheckinHandler,
        FamilyHandler,
        MedicationsHandler,
        NotificationsHandler,
        PhotosHandler,
    )
}

__all__ = [
    "BaseHandler",
    "HandlerRequest",
    "HANDLER_CLASSES",
    "CheckinHandler",
    "FamilyHandler",
    "MedicationsHandler",
    "NotificationsHandler",
    "PhotosHandler",
]
