"""Translate an OpenAI chat request into a framed ``StreamUnifiedChatWithTools`` body."""
from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from google.protobuf import json_format

from . import aiserver_pb2
from .errors import InvalidEnvelope
from .framing import pack_frame
from .tool_prompt import build_tool_prompt, render_tool_calls, render_tool_result, tool_names
from .tools import capability_set, to_remote

logger = logging.getLogger(__name__)

ROLE_USER = 1
ROLE_ASSISTANT = 2

CHAT_MODE_ASK = "Ask"
CHAT_MODE_AGENT = "Agent"
CHAT_MODE_ENUM = {CHAT_MODE_ASK: 1, CHAT_MODE_AGENT: 2}

# Message count from which the request payload is gzip-compressed.
COMPRESSION_MIN_MESSAGES = 3

TOOL_MODE_NATIVE = "native"
TOOL_MODE_PROMPT = "prompt"

_METADATA = {
    "os": "linux",
    "arch": "x64",
    "version": "6.13.0",
    "path": "/usr/bin/node",
}


def _get(m: Any, key: str) -> Any:
    if isinstance(m, dict):
        return m.get(key)
    return getattr(m, key, None)


def flatten_content(c: Any) -> str:
    if c is None:
        return ""
    if isinstance(c, str):
        return c
    if isinstance(c, list):
        parts: list[str] = []
        for item in c:
            if isinstance(item, dict) and isinstance(item.get("text"), str):
                parts.append(item["text"])
            elif isinstance(item, str):
                parts.append(item)
            else:
                parts.append(json.dumps(item, separators=(",", ":")))
        return " ".join(parts)
    return json.dumps(c, separators=(",", ":"))


def _new_message(content: str, role: int, **extra: Any) -> dict[str, Any]:
    return {"content": content, "role": role, "message_id": str(uuid.uuid4()), **extra}


def _translate_messages(messages: Iterable[Any], tool_mode: str) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    call_names: dict[str, str] = {}

    for m in messages:
        role = _get(m, "role")
        text = flatten_content(_get(m, "content"))
        tool_calls = _get(m, "tool_calls") or []

        if role == "tool":
            tool_call_id = _get(m, "tool_call_id")
            if tool_mode == TOOL_MODE_PROMPT:
                out.append(_new_message(render_tool_result(tool_call_id, text), ROLE_USER))
                continue
            result = {"tool_call_id": tool_call_id or "", "result": text}
            if tool_call_id in call_names:
                result["tool_name"] = call_names[tool_call_id]
            out.append(_new_message(text, ROLE_ASSISTANT, tool_results=[result]))
            continue

        if role == "assistant" and tool_calls:
            if tool_mode == TOOL_MODE_PROMPT:
                rendered = render_tool_calls(tool_calls)
                out.append(_new_message(f"{text}\n{rendered}" if text else rendered, ROLE_ASSISTANT))
                continue
            remote_calls = []
            for tc in tool_calls:
                fn = _get(tc, "function") or {}
                name = _get(fn, "name") or ""
                call_id = _get(tc, "id") or ""
                call_names[call_id] = name
                arguments = _get(fn, "arguments")
                if not isinstance(arguments, str):
                    arguments = json.dumps(arguments or {}, separators=(",", ":"))
                remote_calls.append({
                    "id": call_id,
                    "tool": to_remote(name),
                    "name": name,
                    "arguments": arguments,
                })
            out.append(_new_message(text, ROLE_ASSISTANT, tool_calls=remote_calls))
            continue

        if role == "user":
            out.append(_new_message(text, ROLE_USER, chat_mode_enum=CHAT_MODE_ENUM[CHAT_MODE_ASK]))
        else:
            out.append(_new_message(text, ROLE_ASSISTANT))
    return out


def build_request_body(
    messages: list[Any],
    model: str,
    tools: Optional[list[Any]] = None,
    tool_choice: Any = None,
    *,
    tool_mode: str = TOOL_MODE_NATIVE,
) -> dict[str, Any]:
    """Assemble the request as a plain dict keyed by proto field names."""

    instruction_parts = [
        flatten_content(_get(m, "content")) for m in messages if _get(m, "role") == "system"
    ]
    formatted = _translate_messages(
        [m for m in messages if _get(m, "role") != "system"], tool_mode
    )

    capabilities: list[int] = []
    if tool_mode == TOOL_MODE_PROMPT:
        if tool_names(tools):
            instruction_parts.append(build_tool_prompt(tools, tool_choice))
        chat_mode = CHAT_MODE_ASK
    else:
        capabilities = capability_set(tool_names(tools, strict=True))
        chat_mode = CHAT_MODE_AGENT if capabilities else CHAT_MODE_ASK

    request: dict[str, Any] = {
        "messages": formatted,
        "unknown2": 1,
        "instruction": {"instruction": "\n".join(instruction_parts)},
        "unknown4": 1,
        "model": {"name": model, "empty": ""},
        "web_tool": "",
        "unknown13": 1,
        "cursor_setting": {
            "name": "cursor\\aisettings",
            "unknown3": "",
            "unknown6": {"unknown1": "", "unknown2": ""},
            "unknown8": 1,
            "unknown9": 1,
        },
        "unknown19": 1,
        "conversation_id": str(uuid.uuid4()),
        "metadata": {
            **_METADATA,
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        },
        "unknown27": 0,
        "message_ids": [
            {"role": msg["role"], "message_id": msg["message_id"]} for msg in formatted
        ],
        "large_context": 0,
        "unknown38": 0,
        "chat_mode_enum": CHAT_MODE_ENUM[chat_mode],
        "unknown47": "",
        "unknown48": 0,
        "unknown49": 0,
        "unknown51": 0,
        "unknown53": 1,
        "chat_mode": chat_mode,
    }
    if capabilities:
        request["client_side_tool_v2s"] = capabilities
    if tool_choice:
        request["tool_choice"] = tool_choice if isinstance(tool_choice, str) else json.dumps(tool_choice, separators=(",", ":"))
    return {"request": request}


def encode_request(
    messages: list[Any],
    model: str,
    tools: Optional[list[Any]] = None,
    tool_choice: Any = None,
    *,
    tool_mode: str = TOOL_MODE_NATIVE,
) -> bytes:
    """Return the full wire body: a single envelope around the serialized request."""

    body = build_request_body(messages, model, tools, tool_choice, tool_mode=tool_mode)
    try:
        message = json_format.ParseDict(body, aiserver_pb2.StreamUnifiedChatWithToolsRequest())
    except (json_format.ParseError, TypeError, ValueError) as exc:
        raise InvalidEnvelope(f"Request failed schema validation: {exc}") from exc
    if not message.IsInitialized():
        raise InvalidEnvelope("Request is missing required fields")

    payload = message.SerializeToString()
    message_count = len(body["request"]["messages"])
    compress = message_count >= COMPRESSION_MIN_MESSAGES
    logger.debug(
        "Encoded request model=%s messages=%d bytes=%d gzip=%s",
        model,
        message_count,
        len(payload),
        compress,
    )
    return pack_frame(payload, compress=compress)
