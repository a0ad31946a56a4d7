"""Centralized, structured exception hierarchy for the backoffice.

Every application error carries a machine-readable `code` for programmatic
handling and a human-readable `message` for logging and API responses. The
hierarchy maps cleanly to HTTP status codes in `backoffice.core.handlers`:

- `ValidationError` -> 422 Unprocessable Entity
- `EntityNotFoundError` -> 404 Not Found
- `ConflictError` -> 409 Conflict
- `ThrottleLimitExceededError` -> 429 Too Many Requests
- `ThrottlerUnavailableError` -> 503 Service Unavailable
- `DatabaseError` and the base `BackofficeError` -> 500
"""

from typing import Final, Sequence

__all__: Final = [
    "BackofficeError",
    "ValidationError",
    "InvalidValueObjectError",
    "EntityNotFoundError",
    "ConflictError",
    "DuplicateEntityError",
    "DeactivationRestrictedError",
    "DatabaseError",
    "ThrottleLimitExceededError",
    "ThrottlerUnavailableError",
]


class BackofficeError(Exception):
    """Base exception class for all custom errors in the application.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Validation errors (map to 422 Unprocessable Entity)
# ---------------------------------------------------------------------------


class ValidationError(BackofficeError):
    """Raised for general data validation failures.

    Covers malformed commands such as an unrecognized deactivation strategy
    or a cascade relation the repository does not know about.
    """

    def __init__(self, message: str, code: str = "validation_error"):
        super().__init__(message, code)


class InvalidValueObjectError(ValidationError):
    """Raised when a value object is constructed with invalid values."""

    def __init__(self, message: str, code: str = "invalid_value_object"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Domain / persistence errors
# ---------------------------------------------------------------------------


class EntityNotFoundError(BackofficeError):
    """Raised when an identifier does not resolve to a persisted entity.

    Attributes:
        entity_name: Name of the entity type that was looked up.
        entity_id: The identifier that did not resolve.
    """

    def __init__(self, entity_name: str, entity_id: str, code: str = "entity_not_found"):
        self.entity_name = entity_name
        self.entity_id = entity_id
        super().__init__(f"{entity_name} with id '{entity_id}' was not found", code)


class ConflictError(BackofficeError):
    """Raised when an operation conflicts with the current persisted state.

    The canonical case is a hard delete blocked by dependent records.
    """

    def __init__(self, message: str, code: str = "conflict"):
        super().__init__(message, code)


class DuplicateEntityError(ConflictError):
    """Raised when a unique field value is already taken."""

    def __init__(self, entity_name: str, field: str, value: str, code: str = "duplicate_entity"):
        self.entity_name = entity_name
        self.field = field
        super().__init__(f"{entity_name} with {field} '{value}' already exists", code)


class DeactivationRestrictedError(ConflictError):
    """Raised when business restrictions forbid deactivating an entity.

    Attributes:
        violations: Messages of every restriction that blocked the operation.
        blocked_by: Relation names holding the blocking records.
    """

    def __init__(
        self,
        violations: Sequence[str],
        blocked_by: Sequence[str],
        code: str = "deactivation_restricted",
    ):
        self.violations = list(violations)
        self.blocked_by = list(blocked_by)
        if len(self.violations) == 1:
            message = self.violations[0]
        else:
            message = "Cannot deactivate: " + ". ".join(self.violations)
        super().__init__(message, code)


class DatabaseError(BackofficeError):
    """Raised for low-level database interaction errors.

    Wraps driver errors so the API layer never leaks implementation details.
    """

    def __init__(self, message: str, code: str = "database_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Throttling errors
# ---------------------------------------------------------------------------


class ThrottleLimitExceededError(BackofficeError):
    """Raised by route-level throttling when a caller exceeds its limit."""

    def __init__(
        self,
        message: str = "Too many requests",
        retry_after: int | None = None,
        code: str = "throttle_limit_exceeded",
    ):
        self.retry_after = retry_after
        super().__init__(message, code)


class ThrottlerUnavailableError(BackofficeError):
    """Raised when the throttler's backing store cannot be reached.

    Whether to fail open or closed is decided by the integrating middleware.
    """

    def __init__(self, message: str, code: str = "throttler_unavailable"):
        super().__init__(message, code)
