# File: src/triunity/api/server.py
from typing import Optional

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config.service_config import ServiceConfig
from ..exceptions import ApiError
from ..monitoring.metrics import MetricsCollector
from ..telemetry.clock import Clock, RandomSource, SystemClock, make_random_source
from ..telemetry.profiles import get_profile
from ..utils.logger import get_logger
from .errors import api_error_handler, http_error_handler
from .headers import build_response_headers
from .routes import telemetry_router

logger = get_logger(__name__)


def create_app(
    config: Optional[ServiceConfig] = None,
    clock: Optional[Clock] = None,
    rng: Optional[RandomSource] = None,
    metrics: Optional[MetricsCollector] = None,
) -> FastAPI:
    config = config or ServiceConfig()
    profile = get_profile(config.profile_name)

    # Only /api is routed; everything else gets the 404 envelope
    app = FastAPI(
        title="TriUnity Telemetry API",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Injectable capabilities; tests swap in FixedClock and seeded RNGs
    app.state.config = config
    app.state.profile = profile
    app.state.clock = clock or SystemClock()
    app.state.rng = rng or make_random_source(config.get("telemetry.seed"))
    app.state.metrics = metrics or MetricsCollector()

    response_headers = build_response_headers(profile)

    @app.middleware("http")
    async def apply_response_headers(request: Request, call_next):
        response = await call_next(request)
        for key, value in response_headers.items():
            response.headers[key] = value
        return response

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(telemetry_router)

    logger.info(
        "Telemetry API ready: profile=%s operations=%s dev_mode=%s",
        profile.name, ",".join(profile.operation_names), config.dev_mode
    )
    return app
