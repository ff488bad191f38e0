from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Base for domain entities and events."""

    model_config = ConfigDict(arbitrary_types_allowed=True)
