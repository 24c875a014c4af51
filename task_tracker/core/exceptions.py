"""
Application error taxonomy.

Every error the services raise derives from ``AppError`` and carries the HTTP
status the boundary answers with, so the exception handlers in ``main`` never
need to know which service raised it.
"""
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input, raised before anything is written."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message, detail)
        self.errors = errors or []

    @classmethod
    def from_error_list(cls, raw_errors: List[Dict[str, Any]]) -> "ValidationError":
        """Build from the ``errors()`` list of a Pydantic or FastAPI validation error."""
        errors = [format_error(err) for err in raw_errors]
        message = "; ".join(f"{err['field']}: {err['message']}" for err in errors)
        return cls(message or None, errors=errors)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        return cls.from_error_list(exc.errors())


class AuthError(AppError):
    """Bad credentials or a missing, invalid or expired token."""

    status_code = 401
    default_message = "Authentication failed"


class NotFoundError(AppError):
    """The resource does not exist or belongs to someone else."""

    status_code = 404
    default_message = "Resource not found"


class InternalError(AppError):
    status_code = 500
    default_message = "Internal server error"


def format_error(err: Dict[str, Any]) -> Dict[str, str]:
    # Drop the request section ("body", "query") from the location
    loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
    message = str(err.get("msg", "Invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return {"field": ".".join(loc) or "body", "message": message}
