"""GrantRole command and handler."""

from uuid import UUID

import logfire

from roletree.domain.hierarchy.model.value import PrincipalId, RoleId
from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.domain.shared.authorization.gate import public
from roletree.domain.shared.command import Command, CommandHandler, Result
from roletree.domain.shared.error import AuthorizationError


class GrantRole(Command):
    """Command to grant a role to a principal."""

    role: str  # 0x-prefixed role id
    principal: str  # UUID as string
    parent: str | None = None  # Admin for a role granted for the first time


class GrantRoleResult(Result):
    """Result describing the new assignment."""

    role: str
    principal: str
    admin_role: str
    introduced: bool


class GrantRoleHandler(CommandHandler[GrantRole, GrantRoleResult]):
    # The service checks the caller against the role's admin
    __auth__ = public()
    hierarchy: HierarchyService
    caller: PrincipalId | None = None

    async def run(self, cmd: GrantRole) -> GrantRoleResult:
        if self.caller is None:
            raise AuthorizationError("Caller required", code="missing_caller")

        role = RoleId(cmd.role)
        principal = PrincipalId(UUID(cmd.principal))
        parent = RoleId(cmd.parent) if cmd.parent is not None else None

        with logfire.span("GrantRole"):
            introduced = self.hierarchy.grant(self.caller, role, principal, parent)

        return GrantRoleResult(
            role=str(role),
            principal=str(principal),
            admin_role=str(self.hierarchy.role_admin(role)),
            introduced=introduced,
        )
