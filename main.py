import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from app.application.use_cases.notifications import NotificationEngine
from app.config import Settings, get_settings
from app.domain.ports import DeliveryChannel, NotificationStore
from app.infrastructure.database import build_engine, build_session_factory
from app.infrastructure.notifications import BroadcastChannel
from app.infrastructure.repositories import (
    InMemoryNotificationRepository,
    SqlAlchemyNotificationRepository,
)
from app.interfaces.api.errors import register_exception_handlers
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def _build_store(settings: Settings) -> tuple[NotificationStore, Engine | None]:
    if settings.store_backend == "memory":
        return InMemoryNotificationRepository(), None

    db_engine = build_engine(settings.database_url)
    return SqlAlchemyNotificationRepository(build_session_factory(db_engine)), db_engine


def create_app(
    settings: Settings | None = None,
    *,
    store: NotificationStore | None = None,
    channel: DeliveryChannel | None = None,
) -> FastAPI:
    """Crea y configura la aplicación principal de FastAPI.

    El almacén y el canal se construyen una sola vez aquí; las pruebas pueden
    inyectar sus propias implementaciones.
    """

    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    db_engine: Engine | None = None
    if store is None:
        store, db_engine = _build_store(settings)
    channel = channel if channel is not None else BroadcastChannel(
        queue_size=settings.subscriber_queue_size
    )
    notification_engine = NotificationEngine(
        store,
        channel,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
        publish_attempts=settings.publish_attempts,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Prepara el almacén al arrancar y cierra el canal al terminar."""

        if isinstance(store, SqlAlchemyNotificationRepository):
            store.initialize()
        logger.info("Notification service started with %s", type(store).__name__)
        yield
        if isinstance(channel, BroadcastChannel):
            channel.close()
        if db_engine is not None:
            db_engine.dispose()

    app = FastAPI(title="Notification Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.notification_store = store
    app.state.notification_channel = channel
    app.state.notification_engine = notification_engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routes(app)
    return app


app = create_app()
