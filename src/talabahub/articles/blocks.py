"""Article content blocks and the flat-text editor form.

Positions are re-derived as 0..N-1 every time blocks are rebuilt from text.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel

MAX_TAGS = 5


class BlockType(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    QUOTE = "quote"
    CODE = "code"
    LIST = "list"
    IMAGE = "image"


class ContentBlock(BaseModel):
    type: BlockType
    content: dict[str, Any] = {}
    position: int | None = None


def text_to_blocks(text: str) -> list[ContentBlock]:
    """One paragraph block per blank-line separated segment; empty segments are dropped."""
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    return [
        ContentBlock(type=BlockType.PARAGRAPH, content={"text": paragraph}, position=index)
        for index, paragraph in enumerate(paragraphs)
    ]


def _block_text(block: ContentBlock) -> str:
    content = block.content or {}
    if block.type == BlockType.CODE:
        return f"```{content.get('language') or ''}\n{content.get('text') or ''}\n```"
    if block.type == BlockType.LIST:
        return "\n".join(f"- {item}" for item in content.get("items") or [])
    if block.type == BlockType.IMAGE:
        return f"[Image: {content.get('caption') or content.get('url') or ''}]"
    return content.get("text") or ""


def blocks_to_text(blocks: list[ContentBlock] | None) -> str:
    """Flatten blocks for the editor, ordered by position (missing counts as 0)."""
    if not blocks:
        return ""
    ordered = sorted(blocks, key=lambda b: b.position or 0)
    return "\n\n".join(_block_text(b) for b in ordered)


def toggle_tag(selected: list[str], tag: str) -> list[str]:
    """Add or remove ``tag``; adding beyond ``MAX_TAGS`` is ignored."""
    if tag in selected:
        return [t for t in selected if t != tag]
    if len(selected) < MAX_TAGS:
        return [*selected, tag]
    return list(selected)
