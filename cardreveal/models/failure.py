"""
Failure Envelope: Response Classification.

Every HTTP response leaves the service wrapped in ApiResponse, classified
as success, refusal, known failure or unknown failure.

INVARIANT: No raw 500 errors reach the client.

AUTHORITY BOUNDARY:
All responses MUST pass through `finalize_response()`.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    MISSING_REQUIRED = "missing_required"

    # Loyalty backend failures
    EXTERNAL_API_ERROR = "external_api_error"

    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    REFUSAL = "refusal"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """Universal response envelope for all API endpoints."""

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to a finalized ApiResponse."""
        return create_known_failure(self.kind, self.detail or self.message)


class RefusalError(Exception):
    """
    Exception for constraint-based refusals.

    Use when the system refuses to proceed because an input precondition
    does not hold (e.g. a claim with no awarded card design).
    """

    def __init__(self, kind: FailureKind, constraint: str):
        self.kind = kind
        self.constraint = constraint
        super().__init__(constraint)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to a finalized ApiResponse."""
        return create_refusal(self.kind, self.constraint)


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================

# Standard messages, fixed and predictable
STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.REFUSAL: (
        "The system cannot proceed with this request due to a constraint violation."
    ),
    OutcomeType.KNOWN_FAILURE: "The operation failed due to a known issue.",
    OutcomeType.UNKNOWN_FAILURE: "Something went wrong. Please retry.",
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.REFUSAL: "Please modify your request to satisfy the constraint.",
    OutcomeType.KNOWN_FAILURE: "Check the error details and adjust your request.",
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


# ids of responses that passed the boundary; cleared between tests
_finalized_responses: set[int] = set()


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    _finalized_responses.add(id(response))

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through the authority boundary."""
    return id(response) in _finalized_responses


def _failure(outcome: OutcomeType, kind: FailureKind, detail: str | None) -> ApiResponse[Any]:
    response: ApiResponse[Any] = ApiResponse(
        outcome=outcome,
        failure=FailureDetail(
            kind=kind,
            message=STANDARD_MESSAGES[outcome],
            detail=detail,
            suggestion=STANDARD_SUGGESTIONS[outcome],
        ),
    )
    return finalize_response(response)


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    Only the exception type is exposed, never its message.
    """
    return _failure(OutcomeType.UNKNOWN_FAILURE, FailureKind.UNKNOWN, type(exception).__name__)


def create_known_failure(kind: FailureKind, reason: str) -> ApiResponse[Any]:
    """Create a known failure response. Only the technical reason varies."""
    return _failure(OutcomeType.KNOWN_FAILURE, kind, reason)


def create_refusal(kind: FailureKind, constraint: str) -> ApiResponse[Any]:
    """Create a refusal response naming the violated constraint."""
    return _failure(OutcomeType.REFUSAL, kind, f"Constraint violated: {constraint}")


def create_success(data: T) -> ApiResponse[T]:
    """Create a finalized success response."""
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    return finalize_response(response)
