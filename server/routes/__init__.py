"""API routes package."""

from server.routes.transfer_routes import router as transfer_router

__all__ = ["transfer_router"]
