import pytest

from cursor_proxy.encoder import (
    CHAT_MODE_AGENT,
    CHAT_MODE_ASK,
    ROLE_ASSISTANT,
    ROLE_USER,
    build_request_body,
    encode_request,
)
from cursor_proxy.errors import InvalidEnvelope, UnsupportedTool
from cursor_proxy.tools import to_remote

from tests.helpers import decode_request


def _tool(name: str) -> dict:
    return {"type": "function", "function": {"name": name, "description": f"{name} tool", "parameters": {"type": "object"}}}


def _users(n: int) -> list[dict]:
    return [{"role": "user", "content": f"message {i}"} for i in range(n)]


def test_two_messages_are_sent_uncompressed():
    kind, request = decode_request(encode_request(_users(2), "gpt-4o"))
    assert kind == 0
    assert len(request.messages) == 2


def test_three_messages_are_gzip_compressed():
    kind, request = decode_request(encode_request(_users(3), "gpt-4o"))
    assert kind == 1
    assert [m.content for m in request.messages] == ["message 0", "message 1", "message 2"]


def test_compression_ignores_payload_size():
    big = [{"role": "user", "content": "x" * 100_000}, {"role": "assistant", "content": "y" * 100_000}]
    kind, _ = decode_request(encode_request(big, "gpt-4o"))
    assert kind == 0


def test_compression_counts_only_non_system_messages():
    messages = [{"role": "system", "content": "be brief"}, *_users(2)]
    kind, request = decode_request(encode_request(messages, "gpt-4o"))
    assert kind == 0
    assert len(request.messages) == 2


def test_envelope_length_prefix_matches_payload():
    body = encode_request(_users(1), "gpt-4o")
    assert int.from_bytes(body[1:5], "big") == len(body) - 5


def test_system_messages_become_instruction():
    messages = [
        {"role": "system", "content": "first rule"},
        {"role": "user", "content": "hi"},
        {"role": "system", "content": "second rule"},
    ]
    _, request = decode_request(encode_request(messages, "claude-3.5-sonnet"))
    assert request.instruction.instruction == "first rule\nsecond rule"
    assert [m.content for m in request.messages] == ["hi"]
    assert request.model.name == "claude-3.5-sonnet"


def test_roles_and_message_ids():
    messages = [
        {"role": "user", "content": "q"},
        {"role": "assistant", "content": "a"},
        {"role": "user", "content": [{"type": "text", "text": "part"}, "two"]},
    ]
    _, request = decode_request(encode_request(messages, "gpt-4o"))
    assert [m.role for m in request.messages] == [ROLE_USER, ROLE_ASSISTANT, ROLE_USER]
    assert request.messages[2].content == "part two"
    ids = [m.message_id for m in request.messages]
    assert len(set(ids)) == 3
    assert [m.message_id for m in request.message_ids] == ids


def test_conversation_id_is_fresh_per_request():
    _, first = decode_request(encode_request(_users(1), "gpt-4o"))
    _, second = decode_request(encode_request(_users(1), "gpt-4o"))
    assert first.conversation_id
    assert first.conversation_id != second.conversation_id


def test_no_tools_means_ask_mode_without_capabilities():
    _, request = decode_request(encode_request(_users(1), "gpt-4o"))
    assert request.chat_mode == CHAT_MODE_ASK
    assert request.chat_mode_enum == 1
    assert list(request.client_side_tool_v2s) == []


def test_tools_switch_to_agent_mode_with_distinct_capabilities():
    tools = [_tool("read_file"), _tool("edit_file"), _tool("write_file")]
    _, request = decode_request(encode_request(_users(1), "gpt-4o", tools, "auto"))
    assert request.chat_mode == CHAT_MODE_AGENT
    assert request.chat_mode_enum == 2
    assert list(request.client_side_tool_v2s) == [to_remote("read_file"), to_remote("edit_file")]
    assert request.tool_choice == "auto"


def test_unsupported_tool_fails_whole_encode():
    with pytest.raises(UnsupportedTool) as excinfo:
        encode_request(_users(1), "gpt-4o", [_tool("read_file"), _tool("deploy")])
    assert "deploy" in str(excinfo.value)
    assert "read_file" in excinfo.value.supported


@pytest.mark.parametrize(
    "tool",
    [
        {"type": "function", "function": {"description": "no name"}},
        {"type": "function", "function": {"name": ""}},
        {"type": "function"},
    ],
)
def test_nameless_function_tool_is_rejected_in_native_mode(tool):
    with pytest.raises(UnsupportedTool):
        encode_request(_users(1), "gpt-4o", [_tool("read_file"), tool])


def test_nameless_function_tool_is_skipped_in_prompt_mode():
    tools = [_tool("deploy"), {"type": "function", "function": {"name": ""}}]
    _, request = decode_request(encode_request(_users(1), "gpt-4o", tools, tool_mode="prompt"))
    assert "deploy" in request.instruction.instruction


def test_tool_choice_object_is_passed_as_json():
    tools = [_tool("read_file")]
    choice = {"type": "function", "function": {"name": "read_file"}}
    _, request = decode_request(encode_request(_users(1), "gpt-4o", tools, choice))
    assert request.tool_choice == '{"type":"function","function":{"name":"read_file"}}'


def test_tool_history_is_translated():
    messages = [
        {"role": "user", "content": "show main.py"},
        {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {"id": "call_1", "type": "function", "function": {"name": "read_file", "arguments": '{"path": "main.py"}'}}
            ],
        },
        {"role": "tool", "tool_call_id": "call_1", "content": "print('hi')"},
    ]
    _, request = decode_request(encode_request(messages, "gpt-4o", [_tool("read_file")]))
    call_msg, result_msg = request.messages[1], request.messages[2]
    assert call_msg.role == ROLE_ASSISTANT
    assert call_msg.tool_calls[0].id == "call_1"
    assert call_msg.tool_calls[0].tool == to_remote("read_file")
    assert call_msg.tool_calls[0].arguments == '{"path": "main.py"}'
    assert result_msg.role == ROLE_ASSISTANT
    assert result_msg.tool_results[0].tool_call_id == "call_1"
    assert result_msg.tool_results[0].tool_name == "read_file"
    assert result_msg.tool_results[0].result == "print('hi')"


def test_history_tool_call_with_unknown_name_is_rejected():
    messages = [
        {"role": "assistant", "tool_calls": [{"id": "c", "function": {"name": "nope", "arguments": "{}"}}]},
    ]
    with pytest.raises(UnsupportedTool):
        encode_request(messages, "gpt-4o")


def test_prompt_mode_accepts_any_tool_and_describes_it():
    tools = [_tool("deploy_service")]
    _, request = decode_request(encode_request(_users(1), "gpt-4o", tools, tool_mode="prompt"))
    assert request.chat_mode == CHAT_MODE_ASK
    assert list(request.client_side_tool_v2s) == []
    assert "deploy_service" in request.instruction.instruction
    assert "<tool_call>" in request.instruction.instruction


def test_prompt_mode_renders_tool_history_as_text():
    messages = [
        {"role": "user", "content": "deploy"},
        {"role": "assistant", "content": "", "tool_calls": [{"id": "c1", "function": {"name": "deploy_service", "arguments": '{"env": "prod"}'}}]},
        {"role": "tool", "tool_call_id": "c1", "content": "ok"},
    ]
    _, request = decode_request(encode_request(messages, "gpt-4o", [_tool("deploy_service")], tool_mode="prompt"))
    assert request.messages[1].content.startswith("<tool_call>")
    assert '"env": "prod"' in request.messages[1].content
    assert request.messages[2].role == ROLE_USER
    assert request.messages[2].content == "Function call result (id: c1): ok"


def test_schema_violation_raises_invalid_envelope():
    with pytest.raises(InvalidEnvelope):
        encode_request(_users(1), 123)


def test_build_request_body_has_fixed_passthrough_fields():
    body = build_request_body(_users(1), "gpt-4o")["request"]
    assert body["cursor_setting"]["name"] == "cursor\\aisettings"
    assert body["unknown53"] == 1
    assert "client_side_tool_v2s" not in body
    assert body["messages"][0]["chat_mode_enum"] == 1
