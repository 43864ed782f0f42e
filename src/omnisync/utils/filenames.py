"""Filesystem-safe file names derived from article titles."""

import re

MAX_FILENAME_BYTES = 230

UNSAFE_CHARACTERS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')
WHITESPACE = re.compile(r"\s+")


def _truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut ``text`` to at most ``max_bytes`` of UTF-8 without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def _clean(text: str, max_bytes: int) -> str:
    text = WHITESPACE.sub(" ", text)
    text = UNSAFE_CHARACTERS.sub("_", text).strip(" .")
    return _truncate_utf8(text, max_bytes).rstrip(" .")


def safe_filename(
    title: str,
    fallback: str | None = None,
    max_bytes: int = MAX_FILENAME_BYTES,
) -> str:
    """Turn an article title into a file name valid on common filesystems.

    Args:
        title: The article title.
        fallback: Used when nothing usable is left of the title.
        max_bytes: Length cap, in UTF-8 bytes, before any extension.

    Returns:
        A non-empty file name without extension.
    """
    name = _clean(title, max_bytes)
    if not name and fallback:
        name = _clean(fallback, max_bytes)
    return name or "untitled"
