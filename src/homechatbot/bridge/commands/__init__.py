"""Command handling for the bot.

This module provides message parsing and top-level dispatch.
"""

from __future__ import annotations

from .bgchan import BGCHAN_UNAVAILABLE, BgchanHandler
from .dispatch import HELP_TEXT, RUNNING_TEXT, UNKNOWN_TEXT, message_triage
from .parse import is_keyword, normalize_message, split_command

__all__ = [
    "BGCHAN_UNAVAILABLE",
    "BgchanHandler",
    "HELP_TEXT",
    "RUNNING_TEXT",
    "UNKNOWN_TEXT",
    "is_keyword",
    "message_triage",
    "normalize_message",
    "split_command",
]
