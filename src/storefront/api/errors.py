"""Uniform error envelopes for the Orders API.

Domain failures are mapped to HTTP here so the routes stay thin:

    ObjectNotFoundError → 404 {"success": false, "message": ...}
    ValidationError     → 400 {"success": false, "error": ...}
    HTTPException       → its status {"success": false, "message": detail}
    anything else       → 400 {"success": false, "error": ...}, logged
"""

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

logger = structlog.get_logger(__name__)

GENERIC_ERROR = "Your request could not be processed. Please try again."


def _message(exc) -> str:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, str):
        return messages
    if isinstance(messages, dict):
        return " ".join(str(m) for value in messages.values() for m in (value if isinstance(value, list) else [value]))
    return str(exc)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ObjectNotFoundError)
    async def not_found(request: Request, exc: ObjectNotFoundError):
        return JSONResponse(status_code=404, content={"success": False, "message": _message(exc)})

    @app.exception_handler(ValidationError)
    async def invalid_input(request: Request, exc: ValidationError):
        logger.info("Request rejected", path=request.url.path, errors=exc.messages)
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": GENERIC_ERROR, "details": exc.messages},
        )

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def malformed_request(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"success": False, "error": GENERIC_ERROR})

    @app.middleware("http")
    async def unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error while processing request", path=request.url.path)
            return JSONResponse(status_code=400, content={"success": False, "error": GENERIC_ERROR})
