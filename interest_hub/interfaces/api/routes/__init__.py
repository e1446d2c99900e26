from fastapi import FastAPI

from interest_hub.domain.errors import InterestHubError
from interest_hub.interfaces.api.routes_helpers import interest_hub_error_handler

from .interests import router as interests_router
from .notifications import router as notifications_router
from .realtime import router as realtime_router


def register_routes(app: FastAPI) -> None:
    """Register every API router and the domain error handler on ``app``."""

    app.add_exception_handler(InterestHubError, interest_hub_error_handler)
    app.include_router(interests_router)
    app.include_router(notifications_router)
    app.include_router(realtime_router)
