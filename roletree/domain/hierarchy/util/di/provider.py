"""DI provider for the hierarchy domain."""

import logging

from dishka import from_context, provide

from roletree.config import Config
from roletree.domain.hierarchy.command.grant_role import GrantRoleHandler
from roletree.domain.hierarchy.command.revoke_role import RevokeRoleHandler
from roletree.domain.hierarchy.model.value import PrincipalId
from roletree.domain.hierarchy.port.registry import BaseRoleRegistry
from roletree.domain.hierarchy.query.can_behave_like import CanBehaveLikeHandler
from roletree.domain.hierarchy.query.get_hierarchy_roles import GetHierarchyRolesHandler
from roletree.domain.hierarchy.query.get_role import GetRoleHandler
from roletree.domain.hierarchy.query.get_role_admin import GetRoleAdminHandler
from roletree.domain.hierarchy.query.has_a_role import HasARoleHandler
from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.util.di.base import Provider
from roletree.util.di.scope import Scope

logger = logging.getLogger(__name__)


class HierarchyProvider(Provider):
    """DI provider for hierarchy services and handlers."""

    config = from_context(provides=Config, scope=Scope.APP)
    caller = from_context(provides=PrincipalId, scope=Scope.UOW)

    # Query Handlers
    get_hierarchy_roles_handler = provide(GetHierarchyRolesHandler, scope=Scope.UOW)
    can_behave_like_handler = provide(CanBehaveLikeHandler, scope=Scope.UOW)
    get_role_handler = provide(GetRoleHandler, scope=Scope.UOW)
    has_a_role_handler = provide(HasARoleHandler, scope=Scope.UOW)
    get_role_admin_handler = provide(GetRoleAdminHandler, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_hierarchy_service(
        self, config: Config, registry: BaseRoleRegistry
    ) -> HierarchyService:
        """Provide the application-wide HierarchyService, bootstrapping the root if configured."""
        service = HierarchyService.create(registry, max_depth=config.hierarchy.max_depth)
        root_holder = config.hierarchy.root_holder
        if root_holder is not None:
            service.bootstrap(PrincipalId(root_holder))
        logger.info(
            "HierarchyService ready: max_depth=%d, root_holder=%s",
            config.hierarchy.max_depth,
            root_holder,
        )
        return service

    # Command Handlers

    @provide(scope=Scope.UOW)
    def get_grant_role_handler(
        self, hierarchy: HierarchyService, caller: PrincipalId
    ) -> GrantRoleHandler:
        return GrantRoleHandler(hierarchy=hierarchy, caller=caller)

    @provide(scope=Scope.UOW)
    def get_revoke_role_handler(
        self, hierarchy: HierarchyService, caller: PrincipalId
    ) -> RevokeRoleHandler:
        return RevokeRoleHandler(hierarchy=hierarchy, caller=caller)
