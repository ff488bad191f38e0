"""CanBehaveLike query and handler."""

from uuid import UUID

from roletree.domain.hierarchy.model.value import PrincipalId, RoleId
from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.domain.shared.authorization.gate import public
from roletree.domain.shared.query import Query, QueryHandler, Result


class CanBehaveLike(Query):
    """Query whether a principal can act as a role. Never fails."""

    principal: str  # UUID as string
    role: str  # 0x-prefixed role id


class CanBehaveLikeResult(Result):
    allowed: bool


class CanBehaveLikeHandler(QueryHandler[CanBehaveLike, CanBehaveLikeResult]):
    __auth__ = public()
    hierarchy: HierarchyService

    async def run(self, query: CanBehaveLike) -> CanBehaveLikeResult:
        allowed = self.hierarchy.can_act_as(
            PrincipalId(UUID(query.principal)), RoleId(query.role)
        )
        return CanBehaveLikeResult(allowed=allowed)
