"""GetRole query and handler."""

from uuid import UUID

from roletree.domain.hierarchy.model.value import PrincipalId
from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.domain.shared.authorization.gate import public
from roletree.domain.shared.query import Query, QueryHandler, Result


class GetRole(Query):
    principal: str  # UUID as string


class GetRoleResult(Result):
    role: str


class GetRoleHandler(QueryHandler[GetRole, GetRoleResult]):
    """Return the principal's role. Raises NoRoleAssigned for roleless principals."""

    __auth__ = public()
    hierarchy: HierarchyService

    async def run(self, query: GetRole) -> GetRoleResult:
        role = self.hierarchy.role_of(PrincipalId(UUID(query.principal)))
        return GetRoleResult(role=str(role))
