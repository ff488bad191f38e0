"""RevokeRole command and handler."""

from uuid import UUID

import logfire

from roletree.domain.hierarchy.model.value import PrincipalId
from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.domain.shared.authorization.gate import public
from roletree.domain.shared.command import Command, CommandHandler, Result
from roletree.domain.shared.error import AuthorizationError


class RevokeRole(Command):
    """Command to revoke a principal's role."""

    principal: str  # UUID as string


class RevokeRoleResult(Result):
    """Result naming the role that was removed."""

    role: str
    principal: str
    remaining_holders: int


class RevokeRoleHandler(CommandHandler[RevokeRole, RevokeRoleResult]):
    __auth__ = public()
    hierarchy: HierarchyService
    caller: PrincipalId | None = None

    async def run(self, cmd: RevokeRole) -> RevokeRoleResult:
        if self.caller is None:
            raise AuthorizationError("Caller required", code="missing_caller")

        principal = PrincipalId(UUID(cmd.principal))

        with logfire.span("RevokeRole"):
            role = self.hierarchy.role_of(principal)
            self.hierarchy.revoke(self.caller, principal)

        return RevokeRoleResult(
            role=str(role),
            principal=str(principal),
            remaining_holders=self.hierarchy.holder_count(role),
        )
