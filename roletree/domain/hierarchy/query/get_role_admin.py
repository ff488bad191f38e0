"""GetRoleAdmin query and handler."""

from roletree.domain.hierarchy.model.value import RoleId
from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.domain.shared.authorization.gate import public
from roletree.domain.shared.query import Query, QueryHandler, Result


class GetRoleAdmin(Query):
    role: str  # 0x-prefixed role id


class GetRoleAdminResult(Result):
    admin_role: str


class GetRoleAdminHandler(QueryHandler[GetRoleAdmin, GetRoleAdminResult]):
    """Return a role's admin. Roles never introduced report the root."""

    __auth__ = public()
    hierarchy: HierarchyService

    async def run(self, query: GetRoleAdmin) -> GetRoleAdminResult:
        admin = self.hierarchy.role_admin(RoleId(query.role))
        return GetRoleAdminResult(admin_role=str(admin))
