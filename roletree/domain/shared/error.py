"""Error hierarchy for roletree.

Error layers:
- RoleTreeError: Base class for all roletree errors
- DomainError: Rejected operations (bad input, missing authority, invalid state)
- InfrastructureError: System-level failures like misconfiguration

Every DomainError aborts the whole operation with no state change.
"""


class RoleTreeError(Exception):
    """Base class for all roletree errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (rejected operations)
# =============================================================================


class DomainError(RoleTreeError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None, code: str | None = None) -> None:
        super().__init__(message, code=code or "VALIDATION_ERROR")
        self.field = field


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class ConflictError(DomainError):
    """Resource already exists or version conflict."""


class AuthorizationError(DomainError):
    """Caller not authorized for this operation."""


# =============================================================================
# Infrastructure Errors (system-level failures)
# =============================================================================


class InfrastructureError(RoleTreeError):
    """Base class for infrastructure/system errors."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
