"""Plain data carried between the transport and the bot core."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class IncomingMessage:
    room_id: str
    event_id: str
    sender: str
    text: str


@dataclass(frozen=True, slots=True)
class PendingInvite:
    """A room the bot has been invited to but not yet joined."""

    room_id: str
    inviter_id: str
