# File: src/triunity/api/routes/telemetry.py
import time

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ...config.service_config import ServiceConfig
from ...exceptions import (
    EndpointNotFoundError,
    ErrorCode,
    InvalidRequestError,
    MethodNotAllowedError,
)
from ...monitoring.metrics import MetricsCollector
from ...telemetry.clock import Clock, RandomSource
from ...telemetry.generators import GeneratorContext, run_operation
from ...telemetry.models import TransactionSubmission
from ...telemetry.profiles import Profile
from ...utils.logger import get_logger
from ..deps import get_clock, get_config, get_metrics, get_profile, get_rng
from ..envelope import build_metadata, envelope_extras, error_envelope, success_envelope

# Every verb reaches the handler so 405s carry our envelope
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

router = APIRouter()
logger = get_logger(__name__)


def _preflight() -> Response:
    return Response(status_code=200)


@router.api_route("/api", methods=ALL_METHODS, include_in_schema=False)
async def index(request: Request, profile: Profile = Depends(get_profile)):
    if request.method == "OPTIONS":
        return _preflight()
    raise EndpointNotFoundError("", profile.operation_names)


@router.api_route("/api/{operation}", methods=ALL_METHODS, include_in_schema=False)
async def dispatch(
    operation: str,
    request: Request,
    profile: Profile = Depends(get_profile),
    config: ServiceConfig = Depends(get_config),
    clock: Clock = Depends(get_clock),
    rng: RandomSource = Depends(get_rng),
    metrics: MetricsCollector = Depends(get_metrics),
):
    method = request.method
    if method == "OPTIONS":
        return _preflight()

    if method not in profile.allowed_methods:
        raise MethodNotAllowedError(method, profile.allowed_methods)
    if operation not in profile.operations:
        raise EndpointNotFoundError(operation, profile.operation_names)
    if method not in profile.methods_for(operation):
        raise MethodNotAllowedError(method, profile.methods_for(operation))

    submission = await _parse_submission(request) if method == "POST" else None

    now_ms = clock.now_ms()
    ctx = GeneratorContext(
        now_ms=now_ms,
        rng=rng,
        profile=profile,
        max_listed_validators=int(config.get("telemetry.max_listed_validators", 20)),
    )

    started = time.perf_counter()
    try:
        data = run_operation(operation, ctx, submission)
        body = success_envelope(
            data,
            now_ms,
            build_metadata(now_ms, rng, profile, config),
            **envelope_extras(operation, data, profile),
        )
        response = JSONResponse(status_code=200, content=body)
    except Exception as e:
        logger.exception("API Error while generating %s", operation)
        metrics.record_error(operation)
        metrics.record_request(operation, method, 500)
        fields = {"details": str(e)} if config.dev_mode else None
        return JSONResponse(
            status_code=500,
            content=error_envelope(
                ErrorCode.INTERNAL_SERVER_ERROR, "Internal server error", now_ms, fields=fields
            ),
        )

    metrics.record_request(operation, method, 200, time.perf_counter() - started)
    return response


async def _parse_submission(request: Request) -> TransactionSubmission:
    try:
        payload = await request.json()
    except ValueError:
        raise InvalidRequestError("Request body must be valid JSON") from None

    try:
        return TransactionSubmission.model_validate(payload)
    except ValidationError as e:
        details = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise InvalidRequestError("Invalid transaction submission", details=details) from None

