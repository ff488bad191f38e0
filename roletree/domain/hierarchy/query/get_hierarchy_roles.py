"""GetHierarchyRoles query and handler."""

from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.domain.shared.authorization.gate import public
from roletree.domain.shared.query import Query, QueryHandler, Result


class GetHierarchyRoles(Query):
    """Query for every role in the hierarchy, in introduction order."""


class GetHierarchyRolesResult(Result):
    roles: list[str]


class GetHierarchyRolesHandler(QueryHandler[GetHierarchyRoles, GetHierarchyRolesResult]):
    __auth__ = public()
    hierarchy: HierarchyService

    async def run(self, query: GetHierarchyRoles) -> GetHierarchyRolesResult:
        return GetHierarchyRolesResult(roles=[str(r) for r in self.hierarchy.list_roles()])
