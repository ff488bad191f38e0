from dishka import Container, make_container

from roletree.config import Config
from roletree.domain.hierarchy.util.di import HierarchyProvider
from roletree.infrastructure.registry import RegistryProvider
from roletree.util.di.scope import Scope


def create_container(config: Config | None = None) -> Container:
    # Pydantic Settings populates from env vars at runtime
    if config is None:
        config = Config()

    return make_container(
        RegistryProvider(),
        HierarchyProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
