# src/tasktracker/connectors/matrix_client.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from nio import AsyncClient, AsyncClientConfig, LoginResponse

logger = logging.getLogger(__name__)

try:
    import olm  # type: ignore  # noqa: F401

    OLM_AVAILABLE = True
except Exception:
    OLM_AVAILABLE = False


def _session_path(store_dir: Path) -> Path:
    return store_dir / "session.json"


def _load_json(path: Path) -> dict[str, Any]:
    val = json.loads(path.read_text("utf-8"))
    if isinstance(val, dict):
        return val
    raise ValueError("Expected JSON object")


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False), "utf-8")
    os.replace(tmp, path)
    with contextlib.suppress(OSError):
        # Token file: keep it private where the filesystem allows.
        os.chmod(path, 0o600)


def _restore(client: AsyncClient, *, access_token: str, user_id: str, device_id: str, encrypted: bool) -> None:
    client.access_token = access_token
    client.user_id = user_id
    client.device_id = device_id
    if encrypted and device_id:
        try:
            client.load_store()
        except Exception as e:
            logger.warning("Failed to load E2EE store: %r", e)


async def create_matrix_client(settings) -> AsyncClient | None:
    """
    Create a Matrix AsyncClient.

    Credential order:
    1. explicit access token from settings,
    2. session.json saved by a previous password login,
    3. password login (the resulting token is saved to session.json).
    """
    homeserver = (getattr(settings, "matrix_homeserver", "") or "").strip()
    user_id = (getattr(settings, "matrix_user_id", "") or "").strip()
    access_token = (getattr(settings, "matrix_access_token", "") or "").strip()
    password = (getattr(settings, "matrix_password", "") or "").strip()
    device_id = (getattr(settings, "matrix_device_id", "") or "").strip()
    store_dir = Path(getattr(settings, "matrix_store_path", Path(".local/tasktracker/matrix_store")))

    if not homeserver or not user_id:
        logger.error("Matrix is not configured: set TASKTRACKER_MATRIX_HOMESERVER and TASKTRACKER_MATRIX_USER_ID")
        return None

    store_dir.mkdir(parents=True, exist_ok=True)
    session_file = _session_path(store_dir)

    encryption_enabled = bool(OLM_AVAILABLE)
    if encryption_enabled:
        logger.info("python-olm detected: E2EE enabled")
    else:
        logger.warning("python-olm not installed: E2EE disabled")

    client = AsyncClient(
        homeserver,
        user_id,
        store_path=str(store_dir) if encryption_enabled else None,
        config=AsyncClientConfig(encryption_enabled=encryption_enabled, store_sync_tokens=True),
    )

    if access_token:
        _restore(client, access_token=access_token, user_id=user_id, device_id=device_id, encrypted=encryption_enabled)
        logger.info("Matrix client uses configured access token for %s", user_id)
        return client

    if session_file.exists():
        try:
            data = _load_json(session_file)
            if not data.get("access_token") or not data.get("user_id") or not data.get("device_id"):
                raise ValueError("session.json is missing required fields")
            _restore(
                client,
                access_token=str(data["access_token"]),
                user_id=str(data["user_id"]),
                device_id=str(data["device_id"]),
                encrypted=encryption_enabled,
            )
            logger.info("Matrix session restored for %s", client.user_id)
            return client
        except (OSError, ValueError) as e:
            logger.warning("Failed to restore Matrix session.json, will try password login: %r", e)

    if not password:
        logger.error("No Matrix access token, no saved session and no password configured.")
        await client.close()
        return None

    device_name = f"{getattr(settings, 'app_name', 'tasktracker')} (Python)"
    logger.info("Logging in to Matrix to bootstrap a new session (device_name=%r)...", device_name)

    resp = await client.login(password=password, device_name=device_name)
    if not isinstance(resp, LoginResponse):
        logger.error("Matrix login failed: %r", resp)
        await client.close()
        return None

    try:
        _atomic_write_json(
            session_file,
            {"access_token": resp.access_token, "user_id": resp.user_id, "device_id": resp.device_id},
        )
        logger.info("Matrix session saved to %s (user=%s)", session_file, resp.user_id)
    except OSError:
        # The login itself worked; we'll just log in again next start.
        logger.exception("Failed to write Matrix session.json (%s)", session_file)

    return client
