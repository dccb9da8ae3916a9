# src/narratopia/models/content.py
"""Chapter content payloads.

Content arrives either as plain text or as a Draft.js-style raw document::

    "Once upon a time"
    {"blocks": [{"key": "a1", "text": "Once upon"}, {"text": "a time"}], "entityMap": {}}

Both shapes are normalized into the :data:`ChapterContent` variant on the
way in and serialized back to their original wire shape on the way out.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_serializer,
)


class PlainText(BaseModel):
    """Unstructured chapter text."""

    text: str

    @model_serializer
    def _serialize(self) -> str:
        return self.text


class ContentBlock(BaseModel):
    """A single block of a structured document; unknown keys are kept."""

    model_config = ConfigDict(extra="allow")

    text: str = ""

    @field_validator("text", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class BlockDocument(BaseModel):
    """Ordered sequence of text blocks."""

    model_config = ConfigDict(extra="allow")

    blocks: list[ContentBlock] = Field(default_factory=list)


def coerce_content(value: Any) -> Any:
    """Map the wire/storage shapes onto :class:`PlainText` or :class:`BlockDocument`."""

    if value is None or isinstance(value, (PlainText, BlockDocument)):
        return value
    if isinstance(value, str):
        return PlainText(text=value)
    if isinstance(value, dict) and "blocks" in value:
        return BlockDocument.model_validate(value)
    raise ValueError("content must be a string or an object with a 'blocks' list")


ChapterContent = Annotated[PlainText | BlockDocument, BeforeValidator(coerce_content)]


def content_to_storage(content: PlainText | BlockDocument | None) -> Any:
    """Return the JSON-compatible value persisted for ``content``."""

    if content is None:
        return None
    return content.model_dump(mode="json")


__all__ = [
    "PlainText",
    "ContentBlock",
    "BlockDocument",
    "ChapterContent",
    "coerce_content",
    "content_to_storage",
]
