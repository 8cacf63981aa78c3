# src/tasktracker/connectors/matrix_connector.py

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional, Set

from nio import AsyncClient, MatrixRoom, RoomMessageText, RoomSendResponse, exceptions

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ms_now() -> int:
    return int(time.time() * 1000)


def room_allowlist(settings_rooms: list[str]) -> Optional[Set[str]]:
    rooms = [r.strip() for r in (settings_rooms or []) if str(r).strip()]
    return set(rooms) if rooms else None


def is_matrix_room_id(owner: str) -> bool:
    # Room ids look like "!opaque:server".
    return owner.startswith("!") and ":" in owner


async def send_text(client: AsyncClient, *, room_id: str, text: str) -> bool:
    resp = await client.room_send(
        room_id=room_id,
        message_type="m.room.message",
        content={"msgtype": "m.text", "body": text},
        ignore_unverified_devices=True,
    )
    if isinstance(resp, RoomSendResponse):
        return True
    logger.warning("Matrix room_send to %s failed: %r", room_id, resp)
    return False


async def handle_command(state: AppState, body: str, owner: str) -> Optional[str]:
    """Run a chat command off the event loop; handlers may save the task file."""
    try:
        return await asyncio.to_thread(command_registry.handle, state, body, owner)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."


class MatrixNotifier:
    """
    Notifier for reminders owned by Matrix rooms.

    The owner id of a reminder created from Matrix is the room it was created in,
    so delivery goes back to that room.
    """

    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    def handles(self, owner: str) -> bool:
        return is_matrix_room_id(owner)

    async def notify(self, owner: str, text: str) -> bool:
        if not self.handles(owner):
            return False
        try:
            return await send_text(self._client, room_id=owner, text=text)
        except exceptions.OlmUnverifiedDeviceError:
            logger.warning("Cannot deliver reminder to %s: unverified device.", owner)
            return False
        except Exception:
            logger.exception("Failed to deliver reminder to %s.", owner)
            return False


async def run_matrix_connector(
    state: AppState,
    client: AsyncClient,
    stop_event: asyncio.Event,
) -> None:
    """
    Matrix connector (async): callbacks -> initial sync -> sync loop until stop_event.

    Commands are answered in the room they came from; the room id is the reminder owner.
    """
    settings = state.settings
    startup_ts = _ms_now()

    allowed_rooms = room_allowlist(getattr(settings, "matrix_rooms", []) or [])
    logger.info("Matrix allowed_rooms=%s", allowed_rooms if allowed_rooms is not None else "ALL")

    async def message_callback(room: MatrixRoom, event: RoomMessageText) -> None:
        # Ignore history replayed by the first sync.
        ts = getattr(event, "server_timestamp", None)
        if ts is not None and ts <= startup_ts:
            return

        if event.sender == client.user_id:
            return

        if allowed_rooms is not None and room.room_id not in allowed_rooms:
            return

        body = (event.body or "").strip()
        if not body.startswith("/"):
            return

        logger.info("Matrix <%s> %s: %r", room.display_name, event.sender, body)

        resp = await handle_command(state, body, room.room_id)
        if not resp:
            return

        try:
            await send_text(client, room_id=room.room_id, text=resp)
        except exceptions.OlmUnverifiedDeviceError:
            logger.warning("Cannot send command reply: unverified device.")
        except Exception:
            logger.exception("Failed to send command reply.")

    client.add_event_callback(message_callback, RoomMessageText)

    try:
        logger.info("Matrix initial sync...")
        await client.sync(timeout=30000, full_state=True)
        logger.info("Matrix initial sync done. Joined rooms: %d", len(client.rooms))

        while not stop_event.is_set():
            await client.sync(timeout=30000, full_state=False)

    except asyncio.CancelledError:
        logger.info("Matrix connector cancelled.")
        raise
    except Exception:
        logger.exception("Matrix connector crashed.")
    finally:
        logger.info("Matrix connector stopped.")
