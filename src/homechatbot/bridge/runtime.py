"""Bot startup and the main loop."""

from __future__ import annotations

import anyio

from ..client import MatrixTransport
from ..config import Settings
from ..db import HomechatbotDB
from ..errors import HomechatbotError, TransportError
from ..logging import get_logger
from ..types import IncomingMessage
from .commands import BgchanHandler, message_triage, normalize_message
from .invites import InvitationGate

logger = get_logger("homechatbot.runtime")


async def handle_message(
    msg: IncomingMessage,
    transport: MatrixTransport,
    db: HomechatbotDB,
    bgchan: BgchanHandler | None = None,
) -> None:
    """Answer one incoming message in the room it came from."""
    if msg.sender == transport.user_id:
        return
    logger.info(
        "runtime.message_received",
        room_id=msg.room_id,
        sender=msg.sender,
        event_id=msg.event_id,
    )
    try:
        reply = await message_triage(
            normalize_message(msg.text), db=db, bgchan=bgchan
        )
    except HomechatbotError as exc:
        reply = f"ERROR: {exc}"
    except Exception as exc:
        logger.exception("runtime.handler_crashed", room_id=msg.room_id)
        reply = f"ERROR: {exc}"
    try:
        await transport.send_text(msg.room_id, reply)
    except TransportError as exc:
        logger.error("runtime.reply_failed", room_id=msg.room_id, error=str(exc))
        return
    logger.info("runtime.reply_sent", room_id=msg.room_id)


async def _startup_sequence(
    settings: Settings,
) -> tuple[MatrixTransport, HomechatbotDB]:
    """Log in and connect to the store; any failure here is fatal."""
    transport = await MatrixTransport.create(
        settings.matrix_user_id, homeserver=settings.homeserver
    )
    try:
        await transport.login(settings.matrix_password)
        db = await HomechatbotDB.connect(
            settings.mongo_address,
            settings.mongo_username,
            settings.mongo_password,
        )
    except BaseException:
        await transport.close()
        raise
    return transport, db


async def run_bot(settings: Settings, bgchan: BgchanHandler | None = None) -> None:
    transport, db = await _startup_sequence(settings)
    gate = InvitationGate(transport, db, interval=settings.invite_poll_seconds)
    stop = anyio.Event()
    try:
        # Skip the backlog: messages sent before startup are not answered.
        await transport.sync_once()
        async with anyio.create_task_group() as tg:

            async def _on_message(msg: IncomingMessage) -> None:
                tg.start_soon(handle_message, msg, transport, db, bgchan)

            transport.on_text_message(_on_message)
            logger.info("runtime.events_registered")
            tg.start_soon(gate.run, stop)
            logger.info("runtime.invitation_gate_started")
            await transport.sync_forever()
            stop.set()
    finally:
        stop.set()
        await db.close()
        await transport.close()
        logger.info("runtime.stopped")
