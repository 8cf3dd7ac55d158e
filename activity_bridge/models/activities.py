"""
Activity descriptors
"""
from typing import Any, Callable, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class ActivityType(BaseModel):
    """
    An activity type and its rendering capability.

    delivery_element is a factory taking ElementProps and returning an object
    with a notify(notification_type, payload) method. None means the type has
    no delivery implementation in this host.
    """
    model_config = ConfigDict(frozen=True)

    slug: str
    title: Optional[str] = None
    delivery_element: Optional[Callable[..., Any]] = None


class ActivityDescriptor(BaseModel):
    """Identity, type and authored content of a delivered activity"""
    model_config = ConfigDict(frozen=True)

    id: str
    activity_type: Optional[ActivityType] = None
    content: Dict[str, Any] = Field(default_factory=dict)

    def serialized_model(self) -> str:
        """Model blob handed to the rendering capability"""
        return self.model_dump_json(
            exclude={"activity_type": {"delivery_element"}}
        )
