"""HTTP route handlers for the Cursor FastAPI proxy.

Requests are encoded into the Cursor binary envelope, sent upstream once, and
the framed response is decoded either into SSE chunks (``stream: true``) or
into a single ``chat.completion`` object.
"""
from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any, AsyncIterator, Callable, Optional, Union

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from .auth import CredentialStore
from .config import ProxySettings
from .decoder import ResponseDecoder
from .deltas import AnswerChunk, ThinkingChunk, ToolCall, TranslatedDelta
from .encoder import TOOL_MODE_PROMPT, encode_request
from .errors import (
    AuthConfigError,
    CursorProxyError,
    InvalidEnvelope,
    UnsupportedTool,
    UpstreamDisconnect,
    UpstreamError,
    UpstreamTimeout,
)
from .schemas import (
    ChatCompletionsRequest,
    ChatCompletionsResponse,
    ChatResponseMessage,
    Choice,
    ModelsList,
    Usage,
)
from .upstream import available_models, build_headers, stream_chat

logger = logging.getLogger(__name__)
router = APIRouter()

_CORS = {"Access-Control-Allow-Origin": "*"}
DONE_EVENT = "data: [DONE]\n\n"


def _coerce_json_object_from_bytes(raw: bytes) -> dict[str, Any]:
    """Parse request body bytes into a JSON object, handling double-encoded strings.

    Raises:
        ValueError: If body is empty or resolves to empty string
        TypeError: If parsed result is not a JSON object (dict)
        json.JSONDecodeError: If JSON parsing fails
    """
    if not raw or raw.strip() == b"":
        raise ValueError("Empty request body")

    text = raw.decode("utf-8", errors="replace").strip()
    first = json.loads(text)

    # Some clients send the JSON body as a JSON string
    if isinstance(first, str):
        inner = first.strip()
        if not inner:
            raise ValueError("Body resolves to an empty string after decoding")
        first = json.loads(inner)

    if not isinstance(first, dict):
        raise TypeError("Request body must be a JSON object")
    return first


def _settings(request: Request) -> ProxySettings:
    return getattr(request.app.state, "settings", None) or ProxySettings()


def _credentials(request: Request) -> CredentialStore:
    store = getattr(request.app.state, "credentials", None)
    if store is None:
        store = request.app.state.credentials = CredentialStore(_settings(request))
    return store


def _make_debugger(request: Request) -> Optional[Callable[[str], None]]:
    """Compose a debug writer honoring application settings with per-request overrides."""

    settings = _settings(request)
    enabled = settings.debug_sse_enabled
    path = (settings.debug_sse_path or "").strip()

    # enable order: app default → query param → header
    for raw in (
        request.query_params.get("debug_sse") or request.query_params.get("debug"),
        request.headers.get("x-debug-sse"),
    ):
        if not isinstance(raw, str):
            continue
        flag = raw.strip().lower()
        if flag in {"1", "true", "yes", "on"}:
            enabled = True
        elif flag in {"0", "false", "no", "off"}:
            enabled = False
    if not enabled:
        return None

    if path:
        def writer(line: str) -> None:
            try:
                with open(path, "a", encoding="utf-8") as f:
                    f.write(f"[{time.strftime('%Y-%m-%d %H:%M:%S', time.gmtime())} UTC] {line}\n")
            except OSError as e:
                logger.debug("debug write failed: %s", e)
        return writer

    def writer_log(line: str) -> None:
        logger.debug("%s", line)

    return writer_log


def _error_status(exc: CursorProxyError) -> int:
    if isinstance(exc, UnsupportedTool):
        return 400
    if isinstance(exc, AuthConfigError):
        return 401
    if isinstance(exc, UpstreamTimeout):
        return 408
    if isinstance(exc, UpstreamDisconnect):
        return 502
    if isinstance(exc, UpstreamError):
        return exc.status if exc.status >= 400 else 502
    return 500


def _error_response(exc: CursorProxyError) -> JSONResponse:
    status = _error_status(exc)
    if status >= 500:
        logger.error("Request failed with %s: %s", type(exc).__name__, exc)
    else:
        logger.warning("Request rejected with %s: %s", type(exc).__name__, exc)
    return JSONResponse(
        status_code=status,
        content={"error": {"message": str(exc), "type": type(exc).__name__}},
        headers=_CORS,
    )


# ---------- SSE translation ----------

class _StreamState:
    def __init__(self, response_id: str, model: str) -> None:
        self.response_id = response_id
        self.model = model
        self.created = int(time.time())
        self.tool_count = 0

    def _format_event(self, data: dict[str, Any]) -> str:
        return f"data: {json.dumps(data, ensure_ascii=False)}\n\n"

    def _chunk(self, delta: dict[str, Any], finish_reason: str | None = None) -> str:
        return self._format_event({
            "id": self.response_id,
            "object": "chat.completion.chunk",
            "created": self.created,
            "model": self.model,
            "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
        })

    def event_for(self, delta: TranslatedDelta) -> str | None:
        if isinstance(delta, ToolCall):
            call = {"index": self.tool_count, **delta.to_openai()}
            self.tool_count += 1
            return self._chunk({"role": "assistant", "tool_calls": [call]})
        if isinstance(delta, (ThinkingChunk, AnswerChunk)) and delta.text:
            return self._chunk({"content": delta.text})
        return None

    def finish_event(self) -> str:
        return self._chunk({}, "tool_calls" if self.tool_count else "stop")

    def error_event(self, exc: CursorProxyError) -> str:
        message = "Server response timeout" if isinstance(exc, UpstreamTimeout) else str(exc)
        return self._format_event({"error": {"message": message, "type": type(exc).__name__}})


async def _chain(first: bytes | None, rest: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    if first is not None:
        yield first
    async for chunk in rest:
        yield chunk


async def _translate_stream(
    first: bytes | None,
    upstream: AsyncIterator[bytes],
    decoder: ResponseDecoder,
    state: _StreamState,
) -> AsyncIterator[str]:
    try:
        async for chunk in _chain(first, upstream):
            for delta in decoder.decode(chunk):
                event = state.event_for(delta)
                if event:
                    yield event
        for delta in decoder.finish():
            event = state.event_for(delta)
            if event:
                yield event
        yield state.finish_event()
    except CursorProxyError as exc:
        logger.warning("Upstream stream ended with %s: %s", type(exc).__name__, exc)
        yield state.error_event(exc)
    finally:
        await upstream.aclose()
    yield DONE_EVENT


async def _aggregate(
    upstream: AsyncIterator[bytes], decoder: ResponseDecoder
) -> tuple[str, list[ToolCall]]:
    content_buf: list[str] = []
    tool_calls: list[ToolCall] = []

    def _collect(deltas: list[TranslatedDelta]) -> None:
        for delta in deltas:
            if isinstance(delta, ToolCall):
                tool_calls.append(delta)
            else:
                content_buf.append(delta.text)

    try:
        async for chunk in upstream:
            _collect(decoder.decode(chunk))
    finally:
        await upstream.aclose()
    _collect(decoder.finish())
    return "".join(content_buf), tool_calls


# ---------- Routes ----------

@router.get("/health")
async def health() -> JSONResponse:
    return JSONResponse({"status": "ok", "service": "cursor-openai-proxy"})


@router.get("/models", response_model=None)
@router.get("/v1/models", response_model=None)
async def models(request: Request) -> Union[JSONResponse, Response]:
    settings = _settings(request)
    try:
        token = await _credentials(request).resolve(request.headers.get("authorization"))
        headers = build_headers(
            settings,
            token,
            cursor_checksum=request.headers.get("x-cursor-checksum"),
            streaming=False,
        )
        names = await available_models(getattr(request.app.state, "http_client", None), settings, headers)
    except AuthConfigError as exc:
        return _error_response(exc)
    except CursorProxyError as exc:
        logger.error("Failed to list models: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"}, headers=_CORS)

    created = int(time.time())
    payload = ModelsList(
        data=[{"id": name, "created": created, "object": "model", "owned_by": "cursor"} for name in names]
    )
    return JSONResponse(content=payload.model_dump(), headers=_CORS)


@router.post("/chat/completions", response_model=None)
@router.post("/v1/chat/completions", response_model=None)
async def chat_completions(request: Request) -> Union[JSONResponse, Response, StreamingResponse]:
    try:
        payload_dict = _coerce_json_object_from_bytes(await request.body())
        payload = ChatCompletionsRequest(**payload_dict)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse JSON: %s", e)
        return JSONResponse(
            status_code=422,
            content={"error": {"message": f"Invalid JSON: {e.msg} at pos {e.pos}"}},
            headers=_CORS,
        )
    except (TypeError, ValueError) as e:
        logger.error("Invalid request body: %s", e)
        return JSONResponse(status_code=422, content={"error": {"message": str(e)}}, headers=_CORS)

    if not payload.messages:
        return JSONResponse(
            status_code=400,
            content={"error": {"message": "Invalid request. Messages should be a non-empty array"}},
            headers=_CORS,
        )

    settings = _settings(request)
    debug_cb = _make_debugger(request)
    model = payload.model or "claude-3.5-sonnet"
    messages = [m.model_dump(exclude_none=True) for m in payload.messages]

    try:
        token = await _credentials(request).resolve(
            request.headers.get("authorization"), pick_random=True
        )
        body = encode_request(
            messages, model, payload.tools, payload.tool_choice, tool_mode=settings.tool_mode
        )
    except (AuthConfigError, UnsupportedTool, InvalidEnvelope) as exc:
        return _error_response(exc)

    headers = build_headers(settings, token, cursor_checksum=request.headers.get("x-cursor-checksum"))
    if debug_cb:
        debug_cb(f"request: model={model} messages={len(messages)} body_bytes={len(body)}")

    upstream = stream_chat(getattr(request.app.state, "http_client", None), settings, body, headers)
    decoder = ResponseDecoder(
        settings.thinking_open,
        settings.thinking_close,
        parse_tool_tags=settings.tool_mode == TOOL_MODE_PROMPT,
        debug=debug_cb,
    )

    if payload.stream:
        # Wait for the first chunk so upstream failures still map to a status code.
        try:
            first = await upstream.__anext__()
        except StopAsyncIteration:
            first = None
        except CursorProxyError as exc:
            return _error_response(exc)
        state = _StreamState(f"chatcmpl-{uuid.uuid4()}", model)
        return StreamingResponse(
            _translate_stream(first, upstream, decoder, state),
            media_type="text/event-stream",
            headers={**_CORS, "Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    try:
        content, tool_calls = await _aggregate(upstream, decoder)
    except CursorProxyError as exc:
        return _error_response(exc)

    resp = _make_chat_response(model, content, tool_calls).model_dump()
    message = resp["choices"][0]["message"]
    if message["tool_calls"] is None:
        del message["tool_calls"]
    return JSONResponse(content=resp, headers=_CORS)


# ---------- Response builders ----------

def _make_chat_response(
    model: str,
    content: str | None,
    tool_calls: list[ToolCall] | None,
) -> ChatCompletionsResponse:
    message_kwargs: dict[str, Any] = {"role": "assistant"}
    if tool_calls:
        message_kwargs["tool_calls"] = [tc.to_openai() for tc in tool_calls]
    else:
        message_kwargs["content"] = content or ""
    return ChatCompletionsResponse(
        id=f"chatcmpl-{uuid.uuid4()}",
        object="chat.completion",
        created=int(time.time()),
        model=model,
        choices=[
            Choice(
                index=0,
                message=ChatResponseMessage(**message_kwargs),
                finish_reason=("tool_calls" if tool_calls else "stop"),
            )
        ],
        usage=Usage(),
    )
