"""Top-level command routing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...grocery import handle_grocery_command
from ...logging import get_logger
from .bgchan import BgchanHandler, unavailable_bgchan
from .parse import is_keyword, split_command

if TYPE_CHECKING:
    from ...db import HomechatbotDB

logger = get_logger("homechatbot.dispatch")

RUNNING_TEXT = "running"
UNKNOWN_TEXT = "UNKNOWN"
HELP_TEXT = """The following commands are currently supported:
    bgchan
    gro / grocery"""

GROCERY_COMMAND_IDS = frozenset({"gro", "grocery"})


async def message_triage(
    msg: str,
    *,
    db: HomechatbotDB,
    bgchan: BgchanHandler | None = None,
) -> str:
    """Classify a trimmed message and return the reply text."""
    if is_keyword(msg, "test"):
        return RUNNING_TEXT
    if is_keyword(msg, "help"):
        return HELP_TEXT

    parsed = split_command(msg)
    if parsed is None:
        return UNKNOWN_TEXT
    command, rest = parsed
    logger.info("dispatch.command", command=command)

    if command == "bgchan":
        handler = bgchan if bgchan is not None else unavailable_bgchan
        return await handler(rest)
    if command in GROCERY_COMMAND_IDS:
        return await handle_grocery_command(rest, db)
    return UNKNOWN_TEXT
