from roletree.domain.hierarchy.event.events import (
    RoleAdminChanged,
    RoleGranted,
    RoleIntroduced,
    RoleRevoked,
)

__all__ = ["RoleAdminChanged", "RoleGranted", "RoleIntroduced", "RoleRevoked"]
