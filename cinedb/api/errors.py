# cinedb/api/errors.py
"""Error envelopes: every failure is written as {"error": ...}."""

import logging
from typing import Any, Mapping

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from cinedb.api.helpers import EnvelopeResponse, write_json

logger = logging.getLogger(__name__)


def log_error(request: Request, err: BaseException, traceback: bool = True) -> None:
    logger.error(
        "%s %s: %s", request.method, request.url.path, err,
        exc_info=err if traceback else None,
    )


def error_response(status_code: int, message: Any) -> EnvelopeResponse:
    return write_json(status_code, {"error": message})


def server_error_response(request: Request, err: BaseException, traceback: bool = True) -> EnvelopeResponse:
    log_error(request, err, traceback)
    # the cause stays in the log, never in the response
    return error_response(
        500,
        "the server encountered a problem and could not process your request",
    )


def not_found_response() -> EnvelopeResponse:
    return error_response(404, "the requested resource could not be found")


def method_not_allowed_response(request: Request) -> EnvelopeResponse:
    return error_response(
        405,
        f"the {request.method} method is not supported for this resource",
    )


def bad_request_response(err: BaseException) -> EnvelopeResponse:
    return error_response(400, str(err))


def failed_validation_response(errors: Mapping[str, str]) -> EnvelopeResponse:
    return error_response(422, dict(errors))


def edit_conflict_response() -> EnvelopeResponse:
    return error_response(
        409,
        "unable to update the record due to an edit conflict, please try again",
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> EnvelopeResponse:
        if exc.status_code == 404:
            return not_found_response()
        if exc.status_code == 405:
            response = method_not_allowed_response(request)
            if exc.headers:
                response.headers.update(exc.headers)
            return response
        return error_response(exc.status_code, exc.detail)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> EnvelopeResponse:
        # ServerErrorMiddleware re-raises after this and the server logs the traceback
        return server_error_response(request, exc, traceback=False)
