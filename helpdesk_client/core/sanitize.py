"""Input cleanup for form fields and comment messages before they are sent."""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import quote

_WHITESPACE_RE = re.compile(r"\s+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def _strip_control_chars(value: str, *, allow_newlines: bool) -> str:
    kept: list[str] = []
    for ch in value:
        if ch == "\n" and allow_newlines:
            kept.append(ch)
            continue
        if unicodedata.category(ch) == "Cc":
            continue
        kept.append(ch)
    return "".join(kept)


def clean_text(value: object, *, allow_newlines: bool = False) -> str:
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _strip_control_chars(text, allow_newlines=allow_newlines).strip()
    if not allow_newlines:
        return _WHITESPACE_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    return _BLANK_LINES_RE.sub("\n\n", text)


def clean_single_line(value: object) -> str:
    return clean_text(value, allow_newlines=False)


def clean_multiline(value: object) -> str:
    return clean_text(value, allow_newlines=True)


def clean_email(value: object) -> str:
    return clean_single_line(value).lower()


def is_blank(value: str | None) -> bool:
    return not (value or "").strip()


def path_segment(value: str) -> str:
    """Quote an identifier or tracking token for use inside a URL path."""
    cleaned = clean_single_line(value)
    if not cleaned:
        raise ValueError("empty_path_segment")
    return quote(cleaned, safe="")
