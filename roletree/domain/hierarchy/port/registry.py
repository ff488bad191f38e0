"""Port for the flat role-membership store beneath the hierarchy."""

from abc import abstractmethod
from typing import Protocol

from roletree.domain.hierarchy.model.value import PrincipalId, RoleId
from roletree.domain.shared.port import Port


class BaseRoleRegistry(Port, Protocol):
    """Flat store of role holders, informed after every committed change."""

    @abstractmethod
    def has_role(self, role: RoleId, principal: PrincipalId) -> bool:
        """Check whether the principal holds the role in the flat store."""
        ...

    @abstractmethod
    def add_holder(self, role: RoleId, principal: PrincipalId, sender: PrincipalId) -> None:
        """Record that the principal now holds the role."""
        ...

    @abstractmethod
    def remove_holder(self, role: RoleId, principal: PrincipalId, sender: PrincipalId) -> None:
        """Record that the principal no longer holds the role."""
        ...

    @abstractmethod
    def role_introduced(self, role: RoleId, admin_role: RoleId, sender: PrincipalId) -> None:
        """Record that a role was added to the hierarchy."""
        ...

    @abstractmethod
    def role_admin_changed(
        self, role: RoleId, previous_admin_role: RoleId, new_admin_role: RoleId
    ) -> None:
        """Record that a role's admin was replaced during re-parenting."""
        ...
