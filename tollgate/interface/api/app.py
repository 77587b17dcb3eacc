"""FastAPI application."""

from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tollgate.config import Settings
from tollgate.interface.api.routes import health, oauth
from tollgate.interface.error import register_fault_handlers
from tollgate.util.di.container import create_container, setup_di
from tollgate.util.observability import instrument_fastapi


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.
    In tests, conftest.py configures it.

    Args:
        container: DI container to use; the production container is built
            when omitted
    """
    settings = Settings()

    app_instance = FastAPI(
        title="Tollgate",
        description="OAuth 2.0 and OpenID Connect authorization server",
        version="0.1.0",
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    instrument_fastapi(app_instance)

    # Token and signout endpoints are called cross-origin by browser clients
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            "X-Device-Authorization",
            "X-Tollgate-Client-Claim",
            "X-Request-Id",
        ],
        max_age=600,
    )

    register_fault_handlers(app_instance)

    setup_di(app_instance, container or create_container())

    app_instance.include_router(health.router)
    app_instance.include_router(oauth.router, prefix=settings.oauth.path_prefix)

    return app_instance
