"""Hook for the ``bgchan`` command.

The command is served by an external handler injected at startup; this
module only defines its shape and the reply used when none is installed.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

BgchanHandler = Callable[[str], Awaitable[str]]

BGCHAN_UNAVAILABLE = "bgchan is not available on this bot"


async def unavailable_bgchan(rest: str) -> str:
    return BGCHAN_UNAVAILABLE
