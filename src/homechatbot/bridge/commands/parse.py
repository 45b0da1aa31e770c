"""Command parsing utilities."""

from __future__ import annotations

import re

_COMMAND_RE = re.compile(r"(\w+)\s+(.*)", re.DOTALL)


def normalize_message(text: str) -> str:
    """Strip surrounding whitespace from a message body."""
    return text.strip()


def is_keyword(text: str, keyword: str) -> bool:
    """Return True when *text* is exactly *keyword*, ignoring case and padding."""
    return text.lower().strip() == keyword


def split_command(text: str) -> tuple[str, str] | None:
    """Split text into a lower-cased command word and the remaining text.

    The command must be followed by whitespace; the remainder may span
    several lines.

    Args:
        text: The trimmed message text.

    Returns:
        ``(command, rest)``, or None if the text is not ``<word> <rest>``.
    """
    match = _COMMAND_RE.fullmatch(text)
    if match is None:
        return None
    return match.group(1).lower(), match.group(2)
