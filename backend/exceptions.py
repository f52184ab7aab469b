# exceptions.py
"""
Structured exceptions shared by the analysis core and the HTTP layer.

Every error carries a human-readable message plus a machine-readable
error_code, so a client can tell "upload a resume first" apart from
"the analysis service is unavailable" and from "not found".
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception. All custom exceptions inherit from this."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# ─── Request / resource errors ────────────────────────────────────────────────

class ValidationError(AppException):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details={"field": field},
        )


class PreconditionError(AppException):
    """The caller must do something first (e.g. upload a resume)."""

    def __init__(self, message: str, error_code: str = "PRECONDITION_FAILED",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=400,
                         error_code=error_code, details=details)


class UnauthorizedError(AppException):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message, status_code=401, error_code="UNAUTHORIZED")


class ForbiddenError(AppException):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message, status_code=403, error_code="FORBIDDEN")


class NotFoundError(AppException):
    def __init__(self, resource: str, identifier: Optional[Any] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"{resource} not found" + (f": {identifier}" if identifier is not None else ""),
            status_code=404,
            error_code="NOT_FOUND",
            details={"resource": resource, "identifier": identifier, **(details or {})},
        )


class ConflictError(AppException):
    """Raised when a uniqueness rule would be violated."""

    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            details={"resource": resource},
        )


# ─── Analysis pipeline errors ─────────────────────────────────────────────────

class ExtractionError(AppException):
    """Document could not be fetched or decoded to text."""

    def __init__(self, message: str, uri: Optional[str] = None, timeout: bool = False):
        super().__init__(
            message=f"Document extraction failed: {message}",
            status_code=422,
            error_code="EXTRACTION_FAILED",
            details={"uri": uri, "timeout": timeout},
        )
        self.timeout = timeout


class ParseError(AppException):
    """Model output was not valid JSON or did not match the expected schema."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(
            message=f"Failed to parse AI response: {message}",
            status_code=502,
            error_code="PARSE_FAILED",
        )
        self.raw = raw


class ModelInvocationError(AppException):
    """Transport, auth or rate-limit failure from the generative model."""

    def __init__(self, message: str, model: Optional[str] = None, timeout: bool = False):
        super().__init__(
            message=f"AI service error: {message}",
            status_code=503,
            error_code="MODEL_UNAVAILABLE",
            details={"model": model, "timeout": timeout},
        )
        self.timeout = timeout


_ANALYSIS_STATUS = {
    "extraction": 422,
    "parse":      502,
    "model":      503,
    "timeout":    504,
}


class AnalysisError(AppException):
    """
    One analysis attempt failed. `kind` is one of extraction, parse, model,
    timeout; `cause` is the underlying exception.
    """

    def __init__(self, kind: str, cause: Optional[Exception] = None,
                 message: Optional[str] = None):
        self.kind = kind
        self.cause = cause
        if message is None and cause is not None:
            message = getattr(cause, "message", None) or str(cause)
        super().__init__(
            message=message or "Analysis failed",
            status_code=_ANALYSIS_STATUS.get(kind, 500),
            error_code=f"ANALYSIS_{kind.upper()}",
            details={"kind": kind},
        )

    @classmethod
    def from_exception(cls, exc: Exception) -> "AnalysisError":
        if isinstance(exc, AnalysisError):
            return exc
        if isinstance(exc, ParseError):
            return cls("parse", exc)
        if isinstance(exc, ModelInvocationError):
            return cls("timeout" if exc.timeout else "model", exc)
        if isinstance(exc, ExtractionError):
            return cls("timeout" if exc.timeout else "extraction", exc)
        return cls("model", exc)


# ─── FastAPI handlers ─────────────────────────────────────────────────────────

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    logger.warning("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "error_code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again.",
            "details": {},
        },
    )
