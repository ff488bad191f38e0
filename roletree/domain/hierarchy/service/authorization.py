"""AuthorizationChecker: can a principal act as a role?"""

import logging

from roletree.domain.hierarchy.error import Unauthorized
from roletree.domain.hierarchy.model.assignment import AssignmentTable
from roletree.domain.hierarchy.model.tree import RoleTree
from roletree.domain.hierarchy.model.value import ROOT_ROLE, PrincipalId, RoleId
from roletree.domain.shared.service import Service

logger = logging.getLogger("roletree.authz")


class AuthorizationChecker(Service):
    """Answers ancestor-chain authorization queries.

    A principal can act as a target role when its own role is the target or
    any ancestor of it. Holding the root role authorizes everything. Roleless
    principals are never authorized. Reads only; never mutates either store.
    """

    _tree: RoleTree
    _assignments: AssignmentTable

    def can_act_as(self, principal: PrincipalId, target_role: RoleId) -> bool:
        if not self._assignments.has_role(principal):
            return False
        role = self._assignments.role_of(principal)
        if role == ROOT_ROLE:
            return True
        return role in self._tree.ancestors(target_role)

    def require_at_least(self, principal: PrincipalId, role: RoleId) -> None:
        """Raise Unauthorized unless the principal can act as ``role``."""
        if self.can_act_as(principal, role):
            logger.debug("Authorization allowed: principal=%s role=%s", principal, role)
            return
        logger.warning("Authorization denied: principal=%s role=%s", principal, role)
        raise Unauthorized(principal, role)
