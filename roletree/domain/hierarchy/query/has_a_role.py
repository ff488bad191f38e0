"""HasARole query and handler."""

from uuid import UUID

from roletree.domain.hierarchy.model.value import PrincipalId
from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.domain.shared.authorization.gate import public
from roletree.domain.shared.query import Query, QueryHandler, Result


class HasARole(Query):
    principal: str  # UUID as string


class HasARoleResult(Result):
    has_role: bool


class HasARoleHandler(QueryHandler[HasARole, HasARoleResult]):
    __auth__ = public()
    hierarchy: HierarchyService

    async def run(self, query: HasARole) -> HasARoleResult:
        return HasARoleResult(has_role=self.hierarchy.has_role(PrincipalId(UUID(query.principal))))
