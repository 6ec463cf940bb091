"""API route registrations."""

from interfaces.api.routes.session_routes import router as session_router

__all__ = ["session_router"]
