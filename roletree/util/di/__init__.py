from roletree.util.di.base import Provider
from roletree.util.di.scope import Scope

__all__ = ["Provider", "Scope"]
