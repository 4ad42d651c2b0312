from fastapi import FastAPI

from .notifications import router as notifications_router
from .notifications_v2 import router as notifications_v2_router
from .notifications_ws import router as notifications_ws_router


def register_routes(app: FastAPI) -> None:
    """Registra todos los routers de la API en la aplicación FastAPI."""

    app.include_router(notifications_router)
    app.include_router(notifications_ws_router)
    app.include_router(notifications_v2_router)
