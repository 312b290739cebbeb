"""Plain-text helpers for note content and model output."""

from __future__ import annotations

import json
import math
import re
from typing import Any, Optional

from bs4 import BeautifulSoup

_WHITESPACE_RE = re.compile(r"\s+")

# Editor block types that end a line of text.
_BLOCK_NODES = {"paragraph", "heading", "listItem", "blockquote", "codeBlock", "hardBreak"}


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(text: str, max_chars: int, suffix: str = "...") -> str:
    """Cap text at max_chars including the suffix."""
    if len(text) <= max_chars:
        return text
    if max_chars <= len(suffix):
        return text[:max_chars]
    return text[: max_chars - len(suffix)].rstrip() + suffix


def html_to_text(html_content: str) -> str:
    soup = BeautifulSoup(html_content, "html.parser")
    for script in soup(["script", "style"]):
        script.decompose()
    return collapse_whitespace(soup.get_text(" "))


def _collect_editor_text(node: Any, out: list[str]) -> None:
    if isinstance(node, list):
        for child in node:
            _collect_editor_text(child, out)
        return
    if not isinstance(node, dict):
        return
    if node.get("type") == "text" and isinstance(node.get("text"), str):
        out.append(node["text"])
    _collect_editor_text(node.get("content") or [], out)
    if node.get("type") in _BLOCK_NODES:
        out.append(" ")


def editor_json_to_text(doc: Any) -> str:
    """Extract text nodes from a rich-text editor document ({"type": "doc", "content": [...]})."""
    out: list[str] = []
    _collect_editor_text(doc, out)
    return collapse_whitespace("".join(out))


def note_content_to_text(content: Optional[Any]) -> str:
    """
    Convert stored note content to plain text.

    Notes are stored as editor JSON (string or already-decoded dict), HTML, or
    plain text. Unknown shapes yield an empty string.
    """
    if content is None:
        return ""
    if isinstance(content, (dict, list)):
        return editor_json_to_text(content)
    if not isinstance(content, str):
        return ""
    stripped = content.strip()
    if not stripped:
        return ""
    if stripped[0] in "{[":
        try:
            return editor_json_to_text(json.loads(stripped))
        except ValueError:
            pass
    if "<" in stripped and ">" in stripped:
        return html_to_text(stripped)
    return collapse_whitespace(stripped)


def estimate_tokens(text: str) -> int:
    """Rough token estimate (four characters per token)."""
    return math.ceil(len(text) / 4) if text else 0


def count_words(text: str) -> int:
    return len(text.split())
