from roletree.domain.hierarchy.util.di.provider import HierarchyProvider

__all__ = ["HierarchyProvider"]
