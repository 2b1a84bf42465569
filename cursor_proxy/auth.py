"""Bearer token parsing and local Cursor credential discovery."""
from __future__ import annotations

import asyncio
import json
import logging
import random
import sqlite3
import time
import uuid
from pathlib import Path
from typing import Any, Callable, Optional

from .checksum import hashed_64_hex
from .config import ProxySettings
from .errors import AuthConfigError

logger = logging.getLogger(__name__)

_AUTH_TABLES = ("ItemTable", "cursorDiskKV")
_ACCESS_TOKEN_KEY = "cursorAuth/accessToken"


def _strip_prefix(token: str) -> str:
    if "%3A%3A" in token:
        token = token.split("%3A%3A", 1)[1]
    elif "::" in token:
        token = token.split("::", 1)[1]
    return token.strip()


def parse_bearer(authorization: str | None, *, pick_random: bool = False) -> str | None:
    """Extract one token from an ``Authorization`` header holding a comma-separated key list."""

    if not authorization:
        return None
    scheme, _, rest = authorization.strip().partition(" ")
    value = rest if scheme.lower() == "bearer" else authorization
    keys = [k.strip() for k in value.split(",") if k.strip()]
    if not keys:
        return None
    token = random.choice(keys) if pick_random else keys[0]
    return _strip_prefix(token) or None


def client_key(token: str) -> str:
    return hashed_64_hex(token)


def session_id(token: str) -> str:
    return str(uuid.uuid5(uuid.NAMESPACE_DNS, token))


class TokenCache:
    """Single-slot token cache with an injectable clock."""

    def __init__(self, ttl: float = 60.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._token: str | None = None
        self._stored_at = 0.0

    def get(self) -> str | None:
        if self._token is None:
            return None
        if self._clock() - self._stored_at >= self.ttl:
            self.clear()
            return None
        return self._token

    def put(self, token: str) -> None:
        self._token = token
        self._stored_at = self._clock()

    def clear(self) -> None:
        self._token = None
        self._stored_at = 0.0


def storage_candidates(home: Path) -> list[Path]:
    return [
        home / ".config" / "Cursor" / "User" / "globalStorage" / "state.vscdb",
        home / ".config" / "Cursor" / "User" / "storage" / "state.vscdb",
        home / ".config" / "Cursor" / "User" / "state.vscdb",
        home / "Library" / "Application Support" / "Cursor" / "User" / "globalStorage" / "state.vscdb",
        home / "AppData" / "Roaming" / "Cursor" / "User" / "globalStorage" / "state.vscdb",
    ]


def _decode_value(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        return str(value)
    return decoded if isinstance(decoded, str) else str(value)


def read_sqlite_token(path: Path) -> str:
    """Read ``cursorAuth/accessToken`` from a Cursor ``state.vscdb`` file."""

    try:
        conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
    except sqlite3.Error as exc:
        raise AuthConfigError(f"Could not open SQLite database {path}: {exc}") from exc

    found: str | None = None
    try:
        for table in _AUTH_TABLES:
            try:
                rows = conn.execute(
                    f"SELECT key, value FROM {table} WHERE key LIKE 'cursorAuth/%'"
                ).fetchall()
            except sqlite3.Error as exc:
                logger.debug("Skipping table %s in %s: %s", table, path, exc)
                continue
            for key, value in rows:
                if key == _ACCESS_TOKEN_KEY and value:
                    found = _decode_value(value)
    finally:
        conn.close()

    if not found:
        raise AuthConfigError(f"No access token found in Cursor storage {path}")
    return found


def read_cli_token(path: Path) -> str:
    """Read ``accessToken`` from the Cursor CLI ``auth.json`` file."""

    if not path.exists():
        raise AuthConfigError(f"Could not find Cursor auth.json file at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise AuthConfigError(f"Failed to read auth.json {path}: {exc}") from exc
    token = data.get("accessToken") if isinstance(data, dict) else None
    if not isinstance(token, str) or not token:
        raise AuthConfigError(f"No accessToken found in {path}")
    return token


class CredentialStore:
    """Resolve the bearer token for an upstream call.

    A token passed by the caller always wins. Otherwise, depending on
    ``settings.credential_source``, the local Cursor installation is consulted
    and the result cached in ``cache``.
    """

    def __init__(
        self,
        settings: ProxySettings,
        cache: Optional[TokenCache] = None,
        home: Optional[Path] = None,
    ) -> None:
        self.settings = settings
        self.cache = cache or TokenCache(settings.token_cache_ttl)
        self.home = home or Path.home()

    async def resolve(self, authorization: str | None, *, pick_random: bool = False) -> str:
        token = parse_bearer(authorization, pick_random=pick_random)
        if token:
            return token

        source = self.settings.credential_source
        if source == "header":
            raise AuthConfigError("Missing Authorization bearer token")

        cached = self.cache.get()
        if cached:
            return cached

        if source == "cli":
            path = self.home / ".config" / "cursor" / "auth.json"
            token = await asyncio.to_thread(read_cli_token, path)
        else:
            path = self._find_storage()
            token = await asyncio.to_thread(read_sqlite_token, path)

        logger.info("Loaded Cursor access token from %s", path)
        self.cache.put(token)
        return token

    def _find_storage(self) -> Path:
        for candidate in storage_candidates(self.home):
            if candidate.exists():
                return candidate
        raise AuthConfigError("Could not find Cursor storage file")
