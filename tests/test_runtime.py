"""Tests for bridge/runtime.py - message handling and startup."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import anyio
import pytest

from homechatbot.bridge import runtime
from homechatbot.bridge.runtime import _startup_sequence, handle_message, run_bot
from homechatbot.config import Settings
from homechatbot.errors import StoreError, TransportError
from homechatbot.types import IncomingMessage, PendingInvite

from homechatbot_fixtures import FakeDB, FakeTransport, make_message

SETTINGS = Settings(
    matrix_user_id="@bot:example.org",
    matrix_password="pw",
    mongo_address="mongo:27017",
    mongo_username="bot",
    mongo_password="pw",
    invite_poll_seconds=0.01,
)


class SyncingTransport(FakeTransport):
    """FakeTransport that replays queued messages from sync_forever."""

    def __init__(self, queued: list[IncomingMessage] | None = None) -> None:
        super().__init__()
        self.queued = queued or []
        self.callback = None
        self.synced_once = False
        self.closed = False

    def on_text_message(self, callback) -> None:
        self.callback = callback

    async def sync_once(self) -> None:
        self.synced_once = True

    async def sync_forever(self) -> None:
        for msg in self.queued:
            await self.callback(msg)
        # Give spawned handlers and one gate poll time to run.
        await anyio.sleep(0.05)

    async def close(self) -> None:
        self.closed = True


# --- handle_message tests ---


@pytest.mark.anyio
async def test_reply_is_sent_to_originating_room() -> None:
    transport = FakeTransport()

    await handle_message(
        make_message(text="  TEST  ", room_id="!r:example.org"), transport, FakeDB()
    )

    assert transport.sent == [("!r:example.org", "running")]


@pytest.mark.anyio
async def test_own_messages_are_ignored() -> None:
    transport = FakeTransport(user_id="@bot:example.org")

    await handle_message(
        make_message(text="test", sender="@bot:example.org"), transport, FakeDB()
    )

    assert transport.sent == []


@pytest.mark.anyio
async def test_grocery_flow_through_handler() -> None:
    transport = FakeTransport()
    db = FakeDB()

    await handle_message(make_message(text="gro add Dairy\nMilk"), transport, db)
    await handle_message(make_message(text="grocery list"), transport, db)

    assert [body for _, body in transport.sent] == [
        "Items successfully added!",
        "Dairy:\n(1) Milk\n",
    ]


@pytest.mark.anyio
async def test_store_error_becomes_reply() -> None:
    transport = FakeTransport()
    db = FakeDB()
    db.failures["check_collection_exists"] = StoreError("Unable to list collections")

    await handle_message(make_message(text="gro list"), transport, db)

    assert transport.sent[0][1] == "Unable to list collections"


@pytest.mark.anyio
async def test_unexpected_error_is_reported_to_room() -> None:
    transport = FakeTransport()

    async def _broken(rest: str) -> str:
        raise RuntimeError("feed parser exploded")

    await handle_message(make_message(text="bgchan g"), transport, FakeDB(), _broken)

    assert transport.sent[0][1] == "ERROR: feed parser exploded"


@pytest.mark.anyio
async def test_send_failure_is_not_raised() -> None:
    transport = FakeTransport()
    transport.fail_send = True

    await handle_message(make_message(text="test"), transport, FakeDB())

    assert transport.sent == []


# --- startup tests ---


@pytest.mark.anyio
async def test_startup_closes_client_when_login_fails() -> None:
    transport = AsyncMock()
    transport.login = AsyncMock(side_effect=TransportError("Unable to login: 403"))

    with patch.object(
        runtime.MatrixTransport, "create", AsyncMock(return_value=transport)
    ):
        with pytest.raises(TransportError):
            await _startup_sequence(SETTINGS)

    transport.close.assert_awaited_once()


@pytest.mark.anyio
async def test_startup_closes_client_when_store_is_missing() -> None:
    transport = AsyncMock()

    with (
        patch.object(
            runtime.MatrixTransport, "create", AsyncMock(return_value=transport)
        ),
        patch.object(
            runtime.HomechatbotDB,
            "connect",
            AsyncMock(side_effect=StoreError('Homechatbot DB "homechatbot_db" not found')),
        ),
    ):
        with pytest.raises(StoreError):
            await _startup_sequence(SETTINGS)

    transport.login.assert_awaited_once_with("pw")
    transport.close.assert_awaited_once()


@pytest.mark.anyio
async def test_run_bot_answers_messages_and_gates_invites() -> None:
    transport = SyncingTransport(
        [
            make_message(text="test", room_id="!a:example.org"),
            make_message(text="gro list", room_id="!b:example.org"),
        ]
    )
    transport.invites = [PendingInvite("!spam:example.org", "@mallory:example.org")]
    db = FakeDB()

    with patch.object(
        runtime, "_startup_sequence", AsyncMock(return_value=(transport, db))
    ):
        with anyio.fail_after(5):
            await run_bot(SETTINGS)

    assert transport.synced_once
    assert sorted(transport.sent) == [
        ("!a:example.org", "running"),
        ("!b:example.org", "List is empty"),
    ]
    assert transport.rejected == ["!spam:example.org"]
    assert db.closed
    assert transport.closed
