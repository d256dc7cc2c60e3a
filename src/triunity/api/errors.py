# File: src/triunity/api/errors.py
from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..exceptions import ApiError, EndpointNotFoundError, ErrorCode
from .envelope import error_envelope

HTTP_ERROR_CODES = {
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
}


def _operation_label(request: Request) -> str:
    operation = request.path_params.get("operation")
    if operation in request.app.state.profile.operations:
        return operation
    return "unknown"


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    extra = {}
    if isinstance(exc, EndpointNotFoundError):
        extra["available_endpoints"] = exc.available_endpoints

    request.app.state.metrics.record_request(_operation_label(request), request.method, exc.status)
    body = error_envelope(exc.code, exc.message, request.app.state.clock.now_ms(), fields=exc.extra, **extra)
    return JSONResponse(status_code=exc.status, content=body)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Render routing errors outside /api in the same envelope"""
    if request.method == "OPTIONS":
        return Response(status_code=200)

    profile = request.app.state.profile
    now_ms = request.app.state.clock.now_ms()

    if exc.status_code == 404:
        body = error_envelope(
            ErrorCode.NOT_FOUND,
            f"Path {request.url.path} not found",
            now_ms,
            available_endpoints=list(profile.operation_names),
        )
    else:
        if exc.status_code < 500:
            code = HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.INVALID_REQUEST)
        else:
            code = ErrorCode.INTERNAL_SERVER_ERROR
        body = error_envelope(code, str(exc.detail), now_ms)

    request.app.state.metrics.record_request("unknown", request.method, exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))
