"""
app/api/routers package marker.
"""

from app.api.routers.attendee_import import router as attendee_import_router

__all__ = [
    "attendee_import_router",
]
