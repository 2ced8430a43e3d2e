from fastapi import FastAPI

from isocalendar.api.routes.isocalendar import router
from isocalendar.core.middleware import IsocalendarRateLimitMiddleware
from isocalendar.core.observability import configure_logging
from isocalendar.core.observability import init_sentry
from isocalendar.settings import Settings


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application with logging, Sentry and rate limiting."""

    app_settings = app_settings or Settings()
    configure_logging(app_settings)
    init_sentry(app_settings)

    application = FastAPI(title="isocalendar")
    application.add_middleware(
        IsocalendarRateLimitMiddleware,
        requests_per_window=app_settings.rate_limit_per_minute,
        window_seconds=app_settings.rate_limit_window_seconds,
    )
    application.include_router(router)
    return application


app = create_app()
