"""Tool calling by convention: tools described in the prompt, calls parsed out of text.

Used when the proxy runs with ``tool_mode="prompt"``. Any function name is
accepted; the model is asked to answer with ``<tool_call>{...}</tool_call>``
blocks which :class:`ToolCallParser` turns back into tool calls.
"""
from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Iterable

from .deltas import AnswerChunk, ToolCall, TranslatedDelta
from .errors import UnsupportedTool
from .tools import OPENAI_TO_CURSOR_TOOLS

logger = logging.getLogger(__name__)

TOOL_CALL_OPEN = "<tool_call>"
TOOL_CALL_CLOSE = "</tool_call>"

TOOL_USAGE_HEADER = """<tool_usage>
You can call the following tools. To call a tool, reply with one block per call:
<tool_call>{"name": "<tool name>", "arguments": {<JSON arguments>}}</tool_call>
Emit nothing inside the block except that JSON object. You may call several tools
in one reply. Tool results come back in a later message as
"Function call result (id: <call id>): <result>".
</tool_usage>"""


def _function_of(tool: Any) -> dict[str, Any] | None:
    if not isinstance(tool, dict):
        return None
    fn = tool.get("function") if tool.get("type", "function") == "function" else None
    if isinstance(fn, dict):
        return fn
    if isinstance(tool.get("name"), str):
        return tool
    return None


def tool_names(tools: Iterable[Any] | None, *, strict: bool = False) -> list[str]:
    """Names of the declared function tools.

    With ``strict`` a function tool without a usable name raises ``UnsupportedTool``
    instead of being skipped.
    """

    names: list[str] = []
    for tool in tools or ():
        fn = _function_of(tool)
        name = fn.get("name") if fn else None
        if isinstance(name, str) and name.strip():
            names.append(name)
        elif strict and isinstance(tool, dict) and tool.get("type", "function") == "function":
            raise UnsupportedTool(str(name or "<unnamed>"), OPENAI_TO_CURSOR_TOOLS.keys())
    return names


def build_tool_prompt(tools: Iterable[Any] | None, tool_choice: Any = None) -> str:
    """Describe the declared tools in a form the model can follow."""

    lines = [TOOL_USAGE_HEADER, "", "<tools>"]
    for tool in tools or ():
        fn = _function_of(tool)
        if not fn or not fn.get("name"):
            continue
        entry: dict[str, Any] = {"name": fn["name"]}
        if isinstance(fn.get("description"), str) and fn["description"].strip():
            entry["description"] = fn["description"].strip()
        if isinstance(fn.get("parameters"), dict):
            entry["parameters"] = fn["parameters"]
        lines.append(json.dumps(entry, ensure_ascii=False))
    lines.append("</tools>")

    if tool_choice == "required":
        lines.append("You must call at least one tool in your reply.")
    elif tool_choice == "none":
        lines.append("Do not call any tool in your reply.")
    elif isinstance(tool_choice, dict):
        forced = (tool_choice.get("function") or {}).get("name")
        if forced:
            lines.append(f"You must call the tool {forced!r} in your reply.")
    return "\n".join(lines)


def render_tool_calls(tool_calls: Iterable[Any]) -> str:
    """Render OpenAI assistant ``tool_calls`` back into tagged text for the history."""

    blocks: list[str] = []
    for tc in tool_calls:
        if not isinstance(tc, dict):
            continue
        fn = tc.get("function") or {}
        raw_args = fn.get("arguments") or "{}"
        try:
            arguments = json.loads(raw_args) if isinstance(raw_args, str) else raw_args
        except json.JSONDecodeError:
            arguments = raw_args
        body = {"id": tc.get("id"), "name": fn.get("name"), "arguments": arguments}
        blocks.append(f"{TOOL_CALL_OPEN}{json.dumps(body, ensure_ascii=False)}{TOOL_CALL_CLOSE}")
    return "\n".join(blocks)


def render_tool_result(tool_call_id: str | None, text: str) -> str:
    if tool_call_id:
        return f"Function call result (id: {tool_call_id}): {text}"
    return f"Function call result: {text}"


def _partial_suffix(buf: str, marker: str) -> int:
    """Length of the longest suffix of ``buf`` that is a proper prefix of ``marker``."""

    for size in range(min(len(buf), len(marker) - 1), 0, -1):
        if marker.startswith(buf[-size:]):
            return size
    return 0


def _parse_block(body: str) -> ToolCall | None:
    try:
        data = json.loads(body.strip())
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict) or not isinstance(data.get("name"), str) or not data["name"]:
        return None
    arguments = data.get("arguments", {})
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments, ensure_ascii=False, separators=(",", ":"))
    call_id = data.get("id") if isinstance(data.get("id"), str) and data.get("id") else None
    return ToolCall(
        id=call_id or f"call_{uuid.uuid4().hex[:24]}",
        name=data["name"],
        arguments=arguments,
    )


class ToolCallParser:
    """Incrementally split answer text into plain text and ``<tool_call>`` blocks.

    Text that might be the start of an opening tag is held back until the next
    ``feed`` decides it; an unterminated block is released as text by ``flush``.
    """

    def __init__(self) -> None:
        self._buf = ""
        self._inside = False

    def feed(self, text: str) -> list[TranslatedDelta]:
        out: list[TranslatedDelta] = []
        self._buf += text
        while self._buf:
            if not self._inside:
                idx = self._buf.find(TOOL_CALL_OPEN)
                if idx == -1:
                    keep = _partial_suffix(self._buf, TOOL_CALL_OPEN)
                    emit = self._buf[: len(self._buf) - keep]
                    if emit:
                        out.append(AnswerChunk(emit))
                    self._buf = self._buf[len(emit):]
                    break
                if idx:
                    out.append(AnswerChunk(self._buf[:idx]))
                self._buf = self._buf[idx + len(TOOL_CALL_OPEN):]
                self._inside = True
            else:
                idx = self._buf.find(TOOL_CALL_CLOSE)
                if idx == -1:
                    break
                body = self._buf[:idx]
                self._buf = self._buf[idx + len(TOOL_CALL_CLOSE):]
                self._inside = False
                call = _parse_block(body)
                if call is None:
                    logger.warning("Unparseable tool_call block passed through as text: %s", body[:200])
                    out.append(AnswerChunk(f"{TOOL_CALL_OPEN}{body}{TOOL_CALL_CLOSE}"))
                else:
                    out.append(call)
        return out

    def flush(self) -> list[TranslatedDelta]:
        rest = f"{TOOL_CALL_OPEN}{self._buf}" if self._inside else self._buf
        self._buf = ""
        self._inside = False
        return [AnswerChunk(rest)] if rest else []
