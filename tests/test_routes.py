import hashlib
import json

import pytest
from fastapi.testclient import TestClient

from cursor_proxy import routes
from cursor_proxy.app import create_app
from cursor_proxy.config import ProxySettings
from cursor_proxy.errors import UpstreamDisconnect, UpstreamError, UpstreamTimeout
from cursor_proxy.tools import to_remote

from tests.helpers import decode_request, response_frame

AUTH = {"Authorization": "Bearer test-token"}


def _fake_stream(chunks, exc=None, seen=None):
    async def fake_stream_chat(client, settings, body, headers):
        if seen is not None:
            seen["body"] = body
            seen["headers"] = headers
        for chunk in chunks:
            yield chunk
        if exc is not None:
            raise exc
    return fake_stream_chat


def _client(**settings) -> TestClient:
    return TestClient(create_app(ProxySettings(**settings)))


def _sse_events(text: str) -> list:
    events = []
    for line in text.splitlines():
        if not line.startswith("data: "):
            continue
        data = line[6:]
        events.append(data if data == "[DONE]" else json.loads(data))
    return events


def _chat(client, stream=False, **extra):
    body = {"model": "gpt-4o", "messages": [{"role": "user", "content": "hi"}], "stream": stream, **extra}
    return client.post("/v1/chat/completions", json=body, headers=AUTH)


def test_health():
    assert _client().get("/health").json()["status"] == "ok"


def test_non_stream_aggregates_thinking_and_answer(monkeypatch):
    seen = {}
    chunks = [response_frame(thinking="plan"), response_frame(content="ans") + response_frame(content="wer")]
    monkeypatch.setattr(routes, "stream_chat", _fake_stream(chunks, seen=seen))
    resp = _chat(_client())
    assert resp.status_code == 200
    data = resp.json()
    assert data["object"] == "chat.completion"
    choice = data["choices"][0]
    assert choice["message"]["content"] == "<thinking>\nplan\n</thinking>\nanswer"
    assert choice["finish_reason"] == "stop"
    assert "tool_calls" not in choice["message"]
    assert data["usage"] == {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    kind, request = decode_request(seen["body"])
    assert kind == 0
    assert request.messages[0].content == "hi"
    assert seen["headers"]["authorization"] == "Bearer test-token"
    assert seen["headers"]["x-cursor-checksum"].endswith(
        hashlib.sha256(b"test-tokenmacMachineId").hexdigest()
    )


def test_caller_checksum_header_is_forwarded(monkeypatch):
    seen = {}
    monkeypatch.setattr(routes, "stream_chat", _fake_stream([], seen=seen))
    client = _client()
    client.post(
        "/v1/chat/completions",
        json={"model": "m", "messages": [{"role": "user", "content": "x"}]},
        headers={**AUTH, "x-cursor-checksum": "given"},
    )
    assert seen["headers"]["x-cursor-checksum"] == "given"


def test_non_stream_tool_calls(monkeypatch):
    frame = response_frame(tool=to_remote("read_file"), tool_call_id="call_1", arguments='{"path":"a"}')
    monkeypatch.setattr(routes, "stream_chat", _fake_stream([frame]))
    tools = [{"type": "function", "function": {"name": "read_file", "parameters": {}}}]
    resp = _chat(_client(), tools=tools)
    choice = resp.json()["choices"][0]
    assert choice["finish_reason"] == "tool_calls"
    assert choice["message"]["content"] is None
    assert choice["message"]["tool_calls"] == [
        {"id": "call_1", "type": "function", "function": {"name": "read_file", "arguments": '{"path":"a"}'}}
    ]


def test_stream_emits_chunks_then_done(monkeypatch):
    chunks = [response_frame(thinking="t"), response_frame(content="a"), response_frame(content="b")]
    monkeypatch.setattr(routes, "stream_chat", _fake_stream(chunks))
    resp = _chat(_client(), stream=True)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    events = _sse_events(resp.text)
    assert events[-1] == "[DONE]"
    contents = [e["choices"][0]["delta"].get("content", "") for e in events[:-1]]
    assert "".join(contents) == "<thinking>\nt\n</thinking>\nab"
    assert events[-2]["choices"][0]["finish_reason"] == "stop"
    assert all(e["object"] == "chat.completion.chunk" for e in events[:-1])
    assert len({e["id"] for e in events[:-1]}) == 1


def test_stream_tool_call_chunk(monkeypatch):
    frame = response_frame(tool=to_remote("bash"), tool_call_id="c7", arguments='{"command":"ls"}')
    monkeypatch.setattr(routes, "stream_chat", _fake_stream([frame]))
    tools = [{"type": "function", "function": {"name": "bash"}}]
    events = _sse_events(_chat(_client(), stream=True, tools=tools).text)
    delta = events[0]["choices"][0]["delta"]
    assert delta["role"] == "assistant"
    assert delta["tool_calls"][0]["index"] == 0
    assert delta["tool_calls"][0]["function"]["name"] == "run_terminal_command"
    assert events[-2]["choices"][0]["finish_reason"] == "tool_calls"


def test_stream_error_after_first_chunk_becomes_event(monkeypatch):
    monkeypatch.setattr(
        routes, "stream_chat", _fake_stream([response_frame(content="partial")], UpstreamTimeout("slow"))
    )
    events = _sse_events(_chat(_client(), stream=True).text)
    assert events[0]["choices"][0]["delta"]["content"] == "partial"
    assert events[1]["error"]["message"] == "Server response timeout"
    assert events[-1] == "[DONE]"


@pytest.mark.parametrize(
    "exc,status",
    [
        (UpstreamTimeout("slow"), 408),
        (UpstreamDisconnect("reset"), 502),
        (UpstreamError(429, "rate limited"), 429),
    ],
)
@pytest.mark.parametrize("stream", [False, True])
def test_upstream_failures_map_to_status(monkeypatch, exc, status, stream):
    monkeypatch.setattr(routes, "stream_chat", _fake_stream([], exc))
    resp = _chat(_client(), stream=stream)
    assert resp.status_code == status
    assert resp.json()["error"]["type"] == type(exc).__name__


def test_unsupported_tool_is_400(monkeypatch):
    monkeypatch.setattr(routes, "stream_chat", _fake_stream([]))
    resp = _chat(_client(), tools=[{"type": "function", "function": {"name": "deploy"}}])
    assert resp.status_code == 400
    assert "Available tools" in resp.json()["error"]["message"]


def test_prompt_mode_accepts_any_tool_and_parses_tags(monkeypatch):
    seen = {}
    text = 'Calling. <tool_call>{"name": "deploy", "arguments": {"env": "prod"}}</tool_call>'
    monkeypatch.setattr(routes, "stream_chat", _fake_stream([response_frame(content=text)], seen=seen))
    resp = _chat(_client(tool_mode="prompt"), tools=[{"type": "function", "function": {"name": "deploy"}}])
    assert resp.status_code == 200
    message = resp.json()["choices"][0]["message"]
    assert message["tool_calls"][0]["function"]["name"] == "deploy"
    assert json.loads(message["tool_calls"][0]["function"]["arguments"]) == {"env": "prod"}
    _, request = decode_request(seen["body"])
    assert "deploy" in request.instruction.instruction


def test_missing_authorization_is_401():
    resp = _client().post("/v1/chat/completions", json={"messages": [{"role": "user", "content": "x"}]})
    assert resp.status_code == 401


def test_blank_bearer_is_401_not_forwarded(monkeypatch):
    seen = {}
    monkeypatch.setattr(routes, "stream_chat", _fake_stream([], seen=seen))
    resp = _client().post(
        "/v1/chat/completions",
        json={"messages": [{"role": "user", "content": "x"}]},
        headers={"Authorization": "Bearer  "},
    )
    assert resp.status_code == 401
    assert seen == {}


def test_nameless_tool_is_400(monkeypatch):
    monkeypatch.setattr(routes, "stream_chat", _fake_stream([]))
    resp = _chat(_client(), tools=[{"type": "function", "function": {"description": "no name"}}])
    assert resp.status_code == 400


def test_empty_messages_is_400():
    resp = _client().post("/v1/chat/completions", json={"messages": []}, headers=AUTH)
    assert resp.status_code == 400


def test_invalid_json_is_422():
    resp = _client().post("/v1/chat/completions", content=b"{oops", headers=AUTH)
    assert resp.status_code == 422


def test_double_encoded_body_is_accepted(monkeypatch):
    monkeypatch.setattr(routes, "stream_chat", _fake_stream([response_frame(content="ok")]))
    inner = json.dumps({"model": "m", "messages": [{"role": "user", "content": "x"}]})
    resp = _client().post("/chat/completions", content=json.dumps(inner).encode(), headers=AUTH)
    assert resp.status_code == 200
    assert resp.json()["choices"][0]["message"]["content"] == "ok"


def test_models_lists_upstream_names(monkeypatch):
    async def fake_models(client, settings, headers):
        assert headers["content-type"] == "application/proto"
        return ["gpt-4o", "claude-3.5-sonnet"]

    monkeypatch.setattr(routes, "available_models", fake_models)
    data = _client().get("/v1/models", headers=AUTH).json()
    assert [m["id"] for m in data["data"]] == ["gpt-4o", "claude-3.5-sonnet"]
    assert data["data"][0]["owned_by"] == "cursor"


def test_models_failure_is_500(monkeypatch):
    async def fake_models(client, settings, headers):
        raise UpstreamDisconnect("down")

    monkeypatch.setattr(routes, "available_models", fake_models)
    assert _client().get("/models", headers=AUTH).status_code == 500
