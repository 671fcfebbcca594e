import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notification_service.application.use_cases.notifications import store_event_notifications
from notification_service.config import get_settings
from notification_service.infrastructure import database
from notification_service.infrastructure.notifications import (
    NotificationEventConsumer,
    create_redis_client,
    notification_publisher,
)
from notification_service.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Inicializa la base de datos y la suscripción al broker; libera los recursos al cerrar."""

    settings = get_settings()
    database.initialize_database()

    redis = None
    consumer_task: asyncio.Task | None = None
    if settings.consumer_enabled:
        redis = create_redis_client(settings.redis_url, decode_responses=False)
        consumer = NotificationEventConsumer(
            redis=redis,
            session_factory=database.SessionLocal,
            store=store_event_notifications,
            publisher=notification_publisher,
        )
        consumer_task = asyncio.create_task(consumer.run(), name="notification-consumer")
    else:
        logger.info("Notification consumer disabled; only the sync API is served")

    try:
        yield
    finally:
        if consumer_task is not None:
            consumer_task.cancel()
            with suppress(asyncio.CancelledError):
                await consumer_task
        if redis is not None:
            await redis.aclose()
        database.engine.dispose()


def create_app() -> FastAPI:
    """Crea y configura la aplicación principal de FastAPI."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(title="Notification Service", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
