import logging
from typing import Any, Dict, Iterable, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class ExpenseAPIError(Exception):
    """Base error rendered as ``{body_key: message}`` with ``status_code``."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
    body_key = "message"

    def __init__(self, message: Optional[str] = None, body_key: Optional[str] = None):
        self.message = message or self.default_message
        if body_key is not None:
            self.body_key = body_key
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None

    def to_body(self) -> Dict[str, Any]:
        return {self.body_key: self.message}


class ValidationError(ExpenseAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthenticated(ExpenseAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    @property
    def headers(self):
        return {"WWW-Authenticate": "Bearer"}


class InvalidCredential(Unauthenticated):
    default_message = "Invalid token"


class NotFound(ExpenseAPIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Expense not found"


class Conflict(ExpenseAPIError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InternalError(ExpenseAPIError):
    body_key = "error"


def describe_errors(errors: Iterable[Dict[str, Any]], prefix: str = "Validation failed") -> str:
    """Flatten pydantic error dicts into ``prefix: loc: msg; loc: msg``."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return f"{prefix}: " + "; ".join(parts)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ExpenseAPIError)
    async def handle_api_error(request: Request, exc: ExpenseAPIError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = describe_errors(exc.errors(), prefix="Invalid request")
        logger.warning("%s %s rejected: %s", request.method, request.url.path, message)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})
