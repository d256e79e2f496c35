"""
Shared FastAPI App Factory

Provides common app setup for production and test environments.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.exception.exception_handlers import register_exception_handlers
from lodgetix.platform.observability.tracing import TracingConfig
from lodgetix.service.catalog.driving_adapter.http_controller.admin_event_controller import (
    router as admin_event_router,
)
from lodgetix.service.catalog.driving_adapter.http_controller.attendee_controller import (
    router as attendee_router,
)
from lodgetix.service.catalog.driving_adapter.http_controller.customer_controller import (
    router as customer_router,
)
from lodgetix.service.catalog.driving_adapter.http_controller.event_controller import (
    router as event_router,
)
from lodgetix.service.catalog.driving_adapter.http_controller.lodge_controller import (
    router as lodge_router,
)
from lodgetix.service.catalog.driving_adapter.http_controller.registration_controller import (
    router as registration_router,
)
from lodgetix.service.reservation.driving_adapter.http_controller.reservation_controller import (
    router as reservation_router,
)
from lodgetix.service.reservation.driving_adapter.http_controller.session_controller import (
    router as session_router,
)


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    description: str = 'LodgeTix Reservation Service',
    service_name: str = 'lodgetix-service',
) -> FastAPI:
    """
    Create a configured FastAPI application.

    Args:
        lifespan: Async context manager for app lifespan (startup/shutdown)
        title_suffix: Optional suffix for app title (e.g., " (Test)")
        description: App description
        service_name: Service name for tracing

    Returns:
        Configured FastAPI application
    """
    title = f'{settings.PROJECT_NAME}{title_suffix}'

    app = FastAPI(
        title=title,
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Auto-instrument FastAPI (must be done before mounting routes)
    tracing_config = TracingConfig(service_name=service_name)
    tracing_config.instrument_fastapi(app=app)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    register_exception_handlers(app)

    app.include_router(reservation_router, prefix='/api/reservation', tags=['reservation'])
    app.include_router(session_router, prefix='/api/session', tags=['session'])
    app.include_router(event_router, prefix='/api/event', tags=['event'])
    app.include_router(customer_router, prefix='/api/customer', tags=['customer'])
    app.include_router(registration_router, prefix='/api/registration', tags=['registration'])
    app.include_router(attendee_router, prefix='/api/attendee', tags=['attendee'])
    app.include_router(lodge_router, prefix='/api/lodge', tags=['lodge'])
    app.include_router(admin_event_router, prefix='/api/admin/event', tags=['admin'])

    _register_common_endpoints(app)

    return app


def _register_common_endpoints(app: FastAPI) -> None:
    @app.get('/health')
    async def health_check() -> dict[str, str]:
        """Health check endpoint for container orchestration."""
        return {'status': 'healthy', 'service': settings.PROJECT_NAME}

    @app.get('/metrics')
    async def get_metrics() -> PlainTextResponse:
        """Prometheus metrics endpoint."""
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
