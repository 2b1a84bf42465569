"""aiohttp transport to the Cursor API."""
from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp
from aiohttp import ClientError
from google.protobuf.message import DecodeError

from . import aiserver_pb2
from .auth import client_key, session_id
from .checksum import checksum
from .config import ProxySettings
from .errors import UpstreamDisconnect, UpstreamError, UpstreamTimeout

logger = logging.getLogger(__name__)

CHAT_PATH = "/aiserver.v1.ChatService/StreamUnifiedChatWithTools"
MODELS_PATH = "/aiserver.v1.AiService/AvailableModels"
USER_AGENT = "connect-es/1.6.1"
READ_CHUNK_BYTES = 64 * 1024


def build_headers(
    settings: ProxySettings,
    token: str,
    *,
    cursor_checksum: str | None = None,
    streaming: bool = True,
) -> dict[str, str]:
    headers = {
        "authorization": f"Bearer {token}",
        "connect-protocol-version": "1",
        "user-agent": USER_AGENT,
        "x-amzn-trace-id": f"Root={uuid.uuid4()}",
        "x-client-key": client_key(token),
        "x-cursor-checksum": cursor_checksum or checksum(token),
        "x-cursor-client-version": settings.client_version,
        "x-cursor-config-version": str(uuid.uuid4()),
        "x-cursor-timezone": settings.timezone,
        "x-ghost-mode": "true",
        "x-request-id": str(uuid.uuid4()),
        "x-session-id": session_id(token),
    }
    if streaming:
        headers.update({
            "connect-accept-encoding": "gzip",
            "connect-content-encoding": "gzip",
            "content-type": "application/connect+proto",
        })
    else:
        headers.update({
            "accept-encoding": "gzip",
            "content-type": "application/proto",
        })
    return headers


def _timeout(settings: ProxySettings) -> aiohttp.ClientTimeout:
    return aiohttp.ClientTimeout(
        total=None, sock_connect=settings.connect_timeout, sock_read=settings.read_timeout
    )


@asynccontextmanager
async def _post(
    client: Optional[aiohttp.ClientSession],
    settings: ProxySettings,
    path: str,
    body: bytes,
    headers: dict[str, str],
) -> AsyncIterator[aiohttp.ClientResponse]:
    """POST ``body`` to the upstream, with or without the app-wide session."""

    url = f"{settings.upstream_base_url}{path}"
    kwargs = {"data": body, "headers": headers, "timeout": _timeout(settings)}
    if settings.outbound_proxy:
        kwargs["proxy"] = settings.outbound_proxy
    if client is None:
        async with aiohttp.ClientSession() as session:
            async with session.post(url, **kwargs) as response:
                yield response
    else:
        async with client.post(url, **kwargs) as response:
            yield response


async def _raise_for_status(response: aiohttp.ClientResponse) -> None:
    if response.status == 200:
        return
    body = await response.text(errors="replace")
    detail = body[:500] or response.reason or f"Upstream {response.status}"
    raise UpstreamError(response.status, detail)


async def stream_chat(
    client: Optional[aiohttp.ClientSession],
    settings: ProxySettings,
    body: bytes,
    headers: dict[str, str],
) -> AsyncIterator[bytes]:
    """Yield raw response chunks in arrival order.

    Transport failures surface as ``UpstreamTimeout`` or ``UpstreamDisconnect``;
    nothing is retried.
    """

    try:
        async with _post(client, settings, CHAT_PATH, body, headers) as response:
            await _raise_for_status(response)
            async for chunk in response.content.iter_chunked(READ_CHUNK_BYTES):
                if chunk:
                    yield chunk
    except asyncio.TimeoutError as exc:
        raise UpstreamTimeout("Server response timeout") from exc
    except ClientError as exc:
        raise UpstreamDisconnect(f"Upstream connection failed: {exc}") from exc


async def available_models(
    client: Optional[aiohttp.ClientSession],
    settings: ProxySettings,
    headers: dict[str, str],
) -> list[str]:
    try:
        async with _post(client, settings, MODELS_PATH, b"", headers) as response:
            await _raise_for_status(response)
            data = await response.read()
    except asyncio.TimeoutError as exc:
        raise UpstreamTimeout("Server response timeout") from exc
    except ClientError as exc:
        raise UpstreamDisconnect(f"Upstream connection failed: {exc}") from exc

    try:
        parsed = aiserver_pb2.AvailableModelsResponse.FromString(data)
    except DecodeError as exc:
        raise UpstreamError(502, data.decode("utf-8", errors="replace")[:500]) from exc
    names = [m.name for m in parsed.models if m.name]
    return names or list(parsed.model_names)
