"""``x-cursor-checksum`` header generation."""
from __future__ import annotations

import base64
import hashlib
import time


def hashed_64_hex(value: str, salt: str = "") -> str:
    return hashlib.sha256((value + salt).encode("utf-8")).hexdigest()


def obfuscate_bytes(data: bytes) -> bytes:
    """Running XOR cipher; each output byte seeds the next step."""

    out = bytearray(data)
    t = 165
    for r in range(len(out)):
        out[r] = ((out[r] ^ t) + (r % 256)) & 0xFF
        t = out[r]
    return bytes(out)


def checksum(token: str, timestamp_ms: int | None = None) -> str:
    """Build the checksum for ``token`` at ``timestamp_ms`` (defaults to now)."""

    machine_id = hashed_64_hex(token, "machineId")
    mac_machine_id = hashed_64_hex(token, "macMachineId")

    # whole epoch milliseconds, not the milliseconds/1e6 value older clients sent
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    packed = (timestamp_ms & 0xFFFFFFFFFFFF).to_bytes(6, "big")
    encoded = base64.b64encode(obfuscate_bytes(packed)).decode("ascii")
    return f"{encoded}{machine_id}/{mac_machine_id}"
