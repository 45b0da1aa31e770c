"""Thin wrapper over ``nio.AsyncClient``.

Only the calls the bot needs are exposed: login, sending text, reading
pending invitations, joining or leaving invited rooms, and syncing. Error
responses from nio are turned into ``TransportError``.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import nio

from ..errors import TransportError
from ..logging import get_logger
from ..types import IncomingMessage, PendingInvite
from .content_builders import _build_text_content

logger = get_logger("homechatbot.client")

DEVICE_NAME = "homechatbot"
SYNC_TIMEOUT_MS = 30000
UNKNOWN_INVITER = "(none)"

MessageCallback = Callable[[IncomingMessage], Awaitable[None]]


def _tx_id() -> str:
    return str(uuid.uuid4())


def _is_error(response: Any) -> bool:
    return response.__class__.__name__.endswith("Error")


def _error_text(response: Any) -> str:
    message = getattr(response, "message", None)
    return str(message) if message else response.__class__.__name__


def server_name(user_id: str) -> str:
    """Return the server part of a ``@local:server`` user id."""
    _, _, server = user_id.partition(":")
    if not server:
        raise ValueError(f"not a Matrix user id: {user_id!r}")
    return server


def _inviter_of(room: Any) -> str:
    creator = getattr(room, "creator", None)
    if creator:
        return str(creator)
    inviter = getattr(room, "inviter", None)
    if inviter:
        return str(inviter)
    return UNKNOWN_INVITER


class MatrixTransport:
    def __init__(self, client: nio.AsyncClient) -> None:
        self._client = client

    @classmethod
    async def create(
        cls, user_id: str, *, homeserver: str | None = None
    ) -> MatrixTransport:
        """Build a client for *user_id*.

        Without an explicit *homeserver*, the server's ``.well-known`` is
        consulted and ``https://<server name>`` is used when it has none.
        """
        if homeserver is not None:
            return cls(nio.AsyncClient(homeserver.rstrip("/"), user_id))
        client = nio.AsyncClient(f"https://{server_name(user_id)}", user_id)
        try:
            response = await client.discovery_info()
        except Exception as exc:
            logger.warning("client.discovery_failed_fallback", error=str(exc))
        else:
            discovered = getattr(response, "homeserver_url", None)
            if not _is_error(response) and discovered:
                client.homeserver = str(discovered).rstrip("/")
        logger.info("client.homeserver_resolved", homeserver=client.homeserver)
        return cls(client)

    @property
    def user_id(self) -> str:
        return self._client.user_id

    async def login(self, password: str) -> None:
        response = await self._client.login(password, device_name=DEVICE_NAME)
        if _is_error(response):
            raise TransportError(f"Unable to login: {_error_text(response)}")
        logger.info("client.logged_in", user_id=self._client.user_id)

    async def send_text(self, room_id: str, body: str) -> None:
        try:
            response = await self._client.room_send(
                room_id,
                "m.room.message",
                _build_text_content(body),
                tx_id=_tx_id(),
                ignore_unverified_devices=True,
            )
        except nio.LocalProtocolError as exc:
            raise TransportError(f"Unable to send response: {exc}") from exc
        if _is_error(response):
            raise TransportError(f"Unable to send response: {_error_text(response)}")

    def pending_invitations(self) -> list[PendingInvite]:
        return [
            PendingInvite(room_id=room_id, inviter_id=_inviter_of(room))
            for room_id, room in list(self._client.invited_rooms.items())
        ]

    async def accept_invitation(self, room_id: str) -> None:
        try:
            response = await self._client.join(room_id)
        except nio.LocalProtocolError as exc:
            raise TransportError(f"Unable to join room {room_id}: {exc}") from exc
        if _is_error(response):
            raise TransportError(
                f"Unable to join room {room_id}: {_error_text(response)}"
            )

    async def reject_invitation(self, room_id: str) -> None:
        try:
            response = await self._client.room_leave(room_id)
        except nio.LocalProtocolError as exc:
            raise TransportError(f"Unable to reject room {room_id}: {exc}") from exc
        if _is_error(response):
            raise TransportError(
                f"Unable to reject room {room_id}: {_error_text(response)}"
            )

    def on_text_message(self, callback: MessageCallback) -> None:
        """Call *callback* for every text message seen by the sync loop."""

        async def _on_event(room: nio.MatrixRoom, event: nio.RoomMessageText) -> None:
            await callback(
                IncomingMessage(
                    room_id=room.room_id,
                    event_id=event.event_id,
                    sender=event.sender,
                    text=event.body,
                )
            )

        self._client.add_event_callback(_on_event, nio.RoomMessageText)

    async def sync_once(self) -> None:
        response = await self._client.sync(timeout=SYNC_TIMEOUT_MS, full_state=True)
        if _is_error(response):
            raise TransportError(f"Initial sync failed: {_error_text(response)}")

    async def sync_forever(self) -> None:
        await self._client.sync_forever(timeout=SYNC_TIMEOUT_MS, full_state=True)

    async def close(self) -> None:
        await self._client.close()
