"""Connect-style envelope: one kind byte, a big-endian uint32 length, then the payload."""
from __future__ import annotations

import gzip
import struct
from dataclasses import dataclass
from enum import IntEnum

HEADER = struct.Struct(">BI")


class FrameKind(IntEnum):
    RAW_PROTO = 0
    GZIP_PROTO = 1
    RAW_JSON = 2
    GZIP_JSON = 3


@dataclass(frozen=True)
class Frame:
    kind: int
    payload: bytes

    @property
    def length(self) -> int:
        return len(self.payload)

    @property
    def is_structured(self) -> bool:
        return self.kind in (FrameKind.RAW_PROTO, FrameKind.GZIP_PROTO)

    @property
    def is_json(self) -> bool:
        return self.kind in (FrameKind.RAW_JSON, FrameKind.GZIP_JSON)

    def body(self) -> bytes:
        """Payload with gzip removed where the kind says it is compressed."""

        if self.kind in (FrameKind.GZIP_PROTO, FrameKind.GZIP_JSON):
            return gzip.decompress(self.payload)
        return self.payload


def pack_frame(payload: bytes, compress: bool = False) -> bytes:
    kind = FrameKind.RAW_PROTO
    if compress:
        payload = gzip.compress(payload)
        kind = FrameKind.GZIP_PROTO
    return HEADER.pack(kind, len(payload)) + payload


def split_frames(data: bytes) -> tuple[list[Frame], bytes]:
    """Split ``data`` into complete frames.

    Returns the frames and any trailing bytes that do not yet form a whole
    frame. Unknown kinds are returned as-is so callers can skip them.
    """

    frames: list[Frame] = []
    view = memoryview(data)
    offset = 0
    while len(view) - offset >= HEADER.size:
        kind, length = HEADER.unpack_from(view, offset)
        end = offset + HEADER.size + length
        if end > len(view):
            break
        frames.append(Frame(kind, bytes(view[offset + HEADER.size:end])))
        offset = end
    return frames, bytes(view[offset:])


def peek_header(data: bytes) -> tuple[int, int] | None:
    """Return ``(kind, declared_length)`` of the frame at the start of ``data``."""

    if len(data) < HEADER.size:
        return None
    return HEADER.unpack_from(data, 0)


def is_self_contained(data: bytes) -> bool:
    """True when ``data`` is one or more whole frames of known kinds and nothing else."""

    frames, rest = split_frames(data)
    known = {kind.value for kind in FrameKind}
    return bool(frames) and not rest and all(frame.kind in known for frame in frames)
