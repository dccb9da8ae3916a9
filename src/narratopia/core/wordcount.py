# src/narratopia/core/wordcount.py
"""Word counting for chapter content."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from narratopia.models.content import BlockDocument, PlainText


def _count_tokens(text: str) -> int:
    # str.split() without arguments drops empty tokens between whitespace runs.
    return len(text.split())


def count_words(content: Any) -> int:
    """Return the number of words in ``content``.

    Accepts the typed :class:`PlainText` / :class:`BlockDocument` variant or
    the raw shapes they are built from (a string, or a mapping with a
    ``blocks`` list whose items carry ``text``). Unknown shapes count as 0;
    this function never raises.
    """

    if not content:
        return 0
    if isinstance(content, PlainText):
        return _count_tokens(content.text)
    if isinstance(content, BlockDocument):
        return sum(_count_tokens(block.text) for block in content.blocks)
    if isinstance(content, str):
        return _count_tokens(content)
    if isinstance(content, Mapping):
        blocks = content.get("blocks")
        if not isinstance(blocks, (list, tuple)):
            return 0
        total = 0
        for block in blocks:
            text = block.get("text") if isinstance(block, Mapping) else None
            if isinstance(text, str):
                total += _count_tokens(text)
        return total
    return 0


__all__ = ["count_words"]
