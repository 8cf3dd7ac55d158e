"""
Rich content models shared by authoring and delivery
"""
from typing import Any, Dict, List, Optional, Type, TypeVar
from pydantic import BaseModel, Field

from activity_bridge.services.correlation import generate_guid


class RichText(BaseModel):
    """Structured content: a list of block nodes plus an optional editor selection"""
    model: List[Dict[str, Any]] = Field(default_factory=list)
    selection: Optional[Dict[str, Any]] = None


class Identifiable(BaseModel):
    """Content item with a stable identifier"""
    id: str
    content: RichText = Field(default_factory=RichText)


class Feedback(Identifiable):
    """Feedback shown when a response matches"""


class Hint(Identifiable):
    """Hint shown on request"""


T = TypeVar("T", bound=Identifiable)


def rich_text(text: str) -> RichText:
    """Wrap plain text as a single paragraph"""
    return RichText(model=[{"type": "p", "children": [{"text": text}]}])


def from_text(text: str, item_type: Type[T] = Identifiable) -> T:
    """Build an identified content item holding a single paragraph of text"""
    return item_type(id=generate_guid(), content=rich_text(text))


def to_simple_text(content: RichText) -> str:
    """Flatten rich content to plain text, blocks separated by a space"""

    def _collect(node: Any) -> str:
        if isinstance(node, dict):
            if "text" in node:
                return str(node["text"])
            return "".join(_collect(child) for child in node.get("children", []))
        return ""

    blocks = [_collect(node) for node in content.model]
    return " ".join(b for b in blocks if b)
