"""Demultiplex the upstream byte stream into thinking, answer and tool-call deltas.

One :class:`ResponseDecoder` is created per upstream response. Chunks must be
fed in arrival order: the thinking bracket state carries across chunks.
"""
from __future__ import annotations

import json
import logging
import zlib
from enum import Enum
from typing import Callable, Optional

from google.protobuf.message import DecodeError

from . import aiserver_pb2
from .deltas import AnswerChunk, ThinkingChunk, ToolCall, TranslatedDelta
from .errors import MalformedFrame
from .framing import HEADER, Frame, is_self_contained, peek_header, split_frames
from .tool_prompt import ToolCallParser
from .tools import to_local

logger = logging.getLogger(__name__)

DEFAULT_THINKING_OPEN = "<thinking>"
DEFAULT_THINKING_CLOSE = "</thinking>"

# Largest frame the decoder will wait for across chunk boundaries.
MAX_FRAME_BYTES = 4 * 1024 * 1024


class ThinkingState(Enum):
    NOT_STARTED = "not_started"
    OPEN = "open"
    CLOSED = "closed"


def decode_fragment(frame: Frame):
    """Decode a structured frame into a ``StreamUnifiedChatWithToolsResponse``."""

    try:
        return aiserver_pb2.StreamUnifiedChatWithToolsResponse.FromString(frame.body())
    except (DecodeError, OSError, EOFError, zlib.error) as exc:
        raise MalformedFrame(f"kind={frame.kind} length={frame.length}: {exc}") from exc


def tool_call_from_fragment(call) -> ToolCall:
    return ToolCall(
        id=call.tool_call_id,
        name=to_local(call.tool),
        arguments=call.arguments or "{}",
    )


class ResponseDecoder:
    """Stateful reducer for a single upstream response."""

    def __init__(
        self,
        thinking_open: str = DEFAULT_THINKING_OPEN,
        thinking_close: str = DEFAULT_THINKING_CLOSE,
        *,
        parse_tool_tags: bool = False,
        debug: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.thinking_open = thinking_open
        self.thinking_close = thinking_close
        self.state = ThinkingState.NOT_STARTED
        self.side_channel: list[object] = []
        self._pending = b""
        self._parser = ToolCallParser() if parse_tool_tags else None
        self._debug = debug

    def decode(self, chunk: bytes) -> list[TranslatedDelta]:
        """Consume one chunk and return the deltas it produced. Never raises."""

        out: list[TranslatedDelta] = []
        try:
            frames, self._pending = split_frames(self._join_pending(bytes(chunk)))
            self._check_pending_size()
            for frame in frames:
                out.extend(self._handle_frame(frame))
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected failure while decoding upstream chunk")
        return out

    def finish(self) -> list[TranslatedDelta]:
        """Flush held-back text at end of stream and drop any partial frame."""

        if self._pending:
            logger.warning("Discarding %d bytes of incomplete trailing frame", len(self._pending))
            self._pending = b""
        if self._parser is None:
            return []
        return self._parser.flush()

    def _join_pending(self, chunk: bytes) -> bytes:
        """Prefix ``chunk`` with the held partial frame unless that frame is corrupt.

        A held frame whose declared length the new chunk cannot satisfy, while
        the chunk itself is a clean run of frames, had a bad length header.
        """

        if not self._pending:
            return chunk
        header = peek_header(self._pending)
        if header is not None:
            needed = HEADER.size + header[1]
            if len(self._pending) + len(chunk) < needed and is_self_contained(chunk):
                self._drop_pending(MalformedFrame(
                    f"kind={header[0]} declared length={header[1]} never completed"
                ))
                return chunk
        return self._pending + chunk

    def _check_pending_size(self) -> None:
        header = peek_header(self._pending)
        if header is not None and header[1] > MAX_FRAME_BYTES:
            self._drop_pending(MalformedFrame(
                f"kind={header[0]} declared length={header[1]} exceeds {MAX_FRAME_BYTES}"
            ))

    def _drop_pending(self, exc: MalformedFrame) -> None:
        logger.warning("Dropping %d buffered bytes: %s", len(self._pending), exc)
        if self._debug:
            self._debug(f"dropped partial frame: {exc}")
        self._pending = b""

    def _handle_frame(self, frame: Frame) -> list[TranslatedDelta]:
        if self._debug:
            self._debug(f"frame: kind={frame.kind} length={frame.length}")

        if frame.is_json:
            self._handle_json(frame)
            return []
        if not frame.is_structured:
            logger.debug("Skipping frame with unknown kind %d (%d bytes)", frame.kind, frame.length)
            return []

        try:
            fragment = decode_fragment(frame)
        except MalformedFrame as exc:
            logger.warning("Skipping malformed frame: %s", exc)
            return []

        out: list[TranslatedDelta] = []
        if fragment.HasField("client_side_tool_v2_call"):
            out.append(tool_call_from_fragment(fragment.client_side_tool_v2_call))
        out.extend(self.reduce(fragment.message.thinking.content, fragment.message.content))
        return out

    def _handle_json(self, frame: Frame) -> None:
        try:
            message = json.loads(frame.body().decode("utf-8"))
        except (ValueError, OSError, EOFError, zlib.error) as exc:
            logger.warning("Discarding malformed JSON frame: %s", exc)
            return
        if self._debug:
            self._debug(f"json: {json.dumps(message, ensure_ascii=False)[:500]}")
        if not message:
            return
        self.side_channel.append(message)
        if isinstance(message, dict) and message.get("error"):
            logger.warning("Upstream side-channel error: %s", message["error"])
        else:
            logger.debug("Upstream side-channel message: %s", message)

    def reduce(self, thinking: str, text: str) -> list[TranslatedDelta]:
        """Apply the thinking bracket transitions for one fragment."""

        out: list[TranslatedDelta] = []
        think = ""
        if self.state is ThinkingState.NOT_STARTED and thinking:
            think += self.thinking_open + "\n"
            self.state = ThinkingState.OPEN
        think += thinking
        if self.state is ThinkingState.OPEN and not thinking and text:
            think += "\n" + self.thinking_close + "\n"
            self.state = ThinkingState.CLOSED
        if think:
            out.append(ThinkingChunk(think))
        if text:
            if self._parser is not None:
                out.extend(self._parser.feed(text))
            else:
                out.append(AnswerChunk(text))
        return out
