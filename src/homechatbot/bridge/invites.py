"""Accept or reject room invitations based on the stored allow-list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Protocol

import anyio

from ..errors import StoreError, TransportError
from ..logging import get_logger
from ..types import PendingInvite

if TYPE_CHECKING:
    from ..db import HomechatbotDB

logger = get_logger("homechatbot.invites")

DEFAULT_POLL_INTERVAL_S = 1.0

Decision = Literal["accepted", "rejected", "deferred", "failed"]


class InviteTransport(Protocol):
    def pending_invitations(self) -> list[PendingInvite]: ...

    async def accept_invitation(self, room_id: str) -> None: ...

    async def reject_invitation(self, room_id: str) -> None: ...


@dataclass(frozen=True, slots=True)
class InviteOutcome:
    room_id: str
    inviter_id: str
    decision: Decision


class InvitationGate:
    """Polls pending invitations and joins only rooms from allowed inviters.

    A failed join or leave is logged; the invitation stays pending and is
    looked at again on the next poll.
    """

    def __init__(
        self,
        transport: InviteTransport,
        db: HomechatbotDB,
        *,
        interval: float = DEFAULT_POLL_INTERVAL_S,
    ) -> None:
        self._transport = transport
        self._db = db
        self._interval = interval

    async def check_once(self) -> list[InviteOutcome]:
        invites = self._transport.pending_invitations()
        if invites:
            logger.info("invites.pending", count=len(invites))
        return [await self._decide(invite) for invite in invites]

    async def _decide(self, invite: PendingInvite) -> InviteOutcome:
        try:
            allowed = await self._db.is_valid_inviting_user(invite.inviter_id)
        except StoreError as exc:
            logger.warning(
                "invites.allow_list_unavailable",
                room_id=invite.room_id,
                inviter=invite.inviter_id,
                error=str(exc),
            )
            return InviteOutcome(invite.room_id, invite.inviter_id, "deferred")

        try:
            if allowed:
                await self._transport.accept_invitation(invite.room_id)
            else:
                await self._transport.reject_invitation(invite.room_id)
        except TransportError as exc:
            logger.warning(
                "invites.decision_failed",
                room_id=invite.room_id,
                inviter=invite.inviter_id,
                accept=allowed,
                error=str(exc),
            )
            return InviteOutcome(invite.room_id, invite.inviter_id, "failed")
        except Exception:
            logger.exception(
                "invites.decision_crashed",
                room_id=invite.room_id,
                inviter=invite.inviter_id,
                accept=allowed,
            )
            return InviteOutcome(invite.room_id, invite.inviter_id, "failed")

        decision: Decision = "accepted" if allowed else "rejected"
        logger.info(
            f"invites.{decision}", room_id=invite.room_id, inviter=invite.inviter_id
        )
        return InviteOutcome(invite.room_id, invite.inviter_id, decision)

    async def run(self, stop: anyio.Event | None = None) -> None:
        """Poll until *stop* is set, or forever when no event is given."""
        while stop is None or not stop.is_set():
            await self.check_once()
            if stop is None:
                await anyio.sleep(self._interval)
                continue
            with anyio.move_on_after(self._interval):
                await stop.wait()
        logger.info("invites.stopped")
