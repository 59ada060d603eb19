"""Exception-to-HTTP translation.

Every client error leaves the API as {"errors": [message, ...]}:
- Request validation: 400, one message per invalid field
- Malformed id in the path: 404, empty body
- BusinessError: 400, one message
- NotFoundError: 404, empty body
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from verticals.library.errors import BusinessError, NotFoundError

logger = logging.getLogger(__name__)


def error_body(*messages: str) -> dict:
    return {"errors": list(messages)}


def _format_validation_error(error: dict) -> str:
    # Drop the "body"/"query" prefix so messages read "title: ..."
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location)
    return f"{field}: {error['msg']}" if field else error["msg"]


async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    errors = exc.errors()
    # An id that cannot be parsed names no entity.
    if any(tuple(e.get("loc", ()))[:1] == ("path",) for e in errors):
        return Response(status_code=404)
    messages = [_format_validation_error(e) for e in errors]
    return JSONResponse(status_code=400, content=error_body(*messages))


async def business_error_handler(request: Request, exc: BusinessError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=400, content=error_body(exc.message))


async def not_found_handler(request: Request, exc: NotFoundError) -> Response:
    return Response(status_code=404)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(BusinessError, business_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
