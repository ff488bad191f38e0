"""Rejections raised by the role hierarchy.

Messages that name a principal and a role embed them as
``principal=<uuid> role=0x<hex>`` so log tooling can parse them.
"""

from roletree.domain.hierarchy.model.value import PrincipalId, RoleId
from roletree.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)


def _subject(principal: PrincipalId, role: RoleId) -> str:
    return f"principal={principal} role={role}"


class InvalidPrincipal(ValidationError):
    """The null identity was supplied where a principal is required."""

    def __init__(self, principal: PrincipalId) -> None:
        super().__init__(
            f"Invalid principal: principal={principal}",
            field="principal",
            code="invalid_principal",
        )
        self.principal = principal


class AlreadyAssigned(ConflictError):
    """The principal already holds a role and must be revoked first."""

    def __init__(self, principal: PrincipalId, role: RoleId) -> None:
        super().__init__(
            f"Already assigned: {_subject(principal, role)}",
            code="already_assigned",
        )
        self.principal = principal
        self.role = role


class NoRoleAssigned(NotFoundError):
    """The principal holds no role."""

    def __init__(self, principal: PrincipalId) -> None:
        super().__init__(
            f"No role assigned: principal={principal}",
            code="no_role_assigned",
        )
        self.principal = principal


class Unauthorized(AuthorizationError):
    """The principal cannot act as the required role."""

    def __init__(self, principal: PrincipalId, role: RoleId) -> None:
        super().__init__(
            f"Unauthorized: {_subject(principal, role)}",
            code="unauthorized",
        )
        self.principal = principal
        self.role = role


class UnknownParent(NotFoundError):
    """A role was introduced under a parent that is not in the hierarchy."""

    def __init__(self, role: RoleId, parent: RoleId) -> None:
        super().__init__(
            f"Unknown parent: role={role} parent={parent}",
            code="unknown_parent",
        )
        self.role = role
        self.parent = parent


class RootRequired(InvalidStateError):
    """Revoking the principal would leave the root role without holders."""

    def __init__(self, principal: PrincipalId) -> None:
        super().__init__(
            f"Root required: principal={principal} is the last root holder",
            code="root_required",
        )
        self.principal = principal


class DepthLimitExceeded(ValidationError):
    """Introducing the role would make the tree deeper than allowed."""

    def __init__(self, role: RoleId, parent: RoleId, max_depth: int) -> None:
        super().__init__(
            f"Depth limit exceeded: role={role} parent={parent} max_depth={max_depth}",
            field="parent",
            code="depth_limit_exceeded",
        )
        self.role = role
        self.parent = parent
        self.max_depth = max_depth
