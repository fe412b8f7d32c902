"""Content-Type helpers for robots.txt responses."""

from __future__ import annotations

from typing import Optional

__all__ = ["is_plain_text"]


def is_plain_text(content_type: Optional[str]) -> bool:
    """Return ``True`` for textual, non-HTML content types."""

    if not content_type:
        return False
    ctype = content_type.lower()
    return "text" in ctype and "html" not in ctype
