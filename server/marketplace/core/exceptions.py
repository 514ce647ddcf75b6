"""Marketplace errors rendered as RFC 9457 Problem Details."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://marketplace.example.com/problems"


class ProblemDetailsException(HTTPException):
    """
    Base exception for every error the marketplace reports to a caller.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific members
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details: Dict[str, Any] = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }
        if self.detail:
            self.problem_details["detail"] = self.detail
        if self.instance:
            self.problem_details["instance"] = self.instance
        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )


class ValidationError(ProblemDetailsException):
    """Malformed input that passed schema parsing but breaks a domain rule."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        errors: Optional[Dict[str, Any]] = None,
    ):
        extensions = {}
        if errors:
            extensions["errors"] = errors

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Missing or unusable bearer credentials."""

    def __init__(self, detail: str = "Authorization credentials are required"):
        super().__init__(
            status_code=401,
            title="Authorization Required",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/authentication-required",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Authenticated caller is not allowed to touch the resource."""

    def __init__(self, detail: str = "Insufficient permissions to access this resource"):
        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/access-forbidden",
        )


class NotFoundError(ProblemDetailsException):
    """Referenced tour, vendor, review or availability record is absent."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {"resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    """Request conflicts with stored state; never retried automatically."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
    ):
        extensions = {}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title="Resource Conflict",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-conflict",
            extensions=extensions,
        )


class ConsistencyFailureError(ProblemDetailsException):
    """
    A tour could not be saved after its derived fields were recomputed.

    The surrounding transaction has been rolled back, so the subordinate
    review or availability write is not committed either.
    """

    def __init__(
        self,
        tour_id: str,
        operation: str,
        attempts: int,
        detail: Optional[str] = None,
    ):
        if not detail:
            detail = f"Tour {tour_id} could not be updated after {operation} ({attempts} attempts)"

        super().__init__(
            status_code=500,
            title="Consistency Failure",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/consistency-failure",
            extensions={
                "code": "CONSISTENCY_FAILURE",
                "retryable": False,
                "tour_id": tour_id,
                "operation": operation,
                "attempts": attempts,
            },
        )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """Render a ProblemDetailsException as its problem document."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.problem_details,
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request schema failures as a 422 problem with violations."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "type": f"{PROBLEM_BASE_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "The request body failed schema validation",
            "instance": str(request.url),
            "violations": violations,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled error under a fresh error_id and hide its details from the caller."""
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path, "error": str(exc)},
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "type": f"{PROBLEM_BASE_URI}/internal-server-error",
            "title": "Internal Server Error",
            "status": 500,
            "detail": "An unexpected error occurred while processing the request",
            "instance": str(request.url),
            "error_id": error_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
