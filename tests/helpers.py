import gzip
import struct

from cursor_proxy import aiserver_pb2


def response_frame(
    content: str = "",
    thinking: str = "",
    *,
    tool: int | None = None,
    tool_call_id: str = "",
    arguments: str = "",
    kind: int = 0,
) -> bytes:
    msg = aiserver_pb2.StreamUnifiedChatWithToolsResponse()
    if content:
        msg.message.content = content
    if thinking:
        msg.message.thinking.content = thinking
    if tool is not None:
        msg.client_side_tool_v2_call.tool = tool
        msg.client_side_tool_v2_call.tool_call_id = tool_call_id
        msg.client_side_tool_v2_call.arguments = arguments
    payload = msg.SerializeToString()
    if kind == 1:
        payload = gzip.compress(payload)
    return struct.pack(">BI", kind, len(payload)) + payload


def raw_frame(kind: int, payload: bytes) -> bytes:
    return struct.pack(">BI", kind, len(payload)) + payload


def decode_request(body: bytes):
    kind, length = struct.unpack(">BI", body[:5])
    payload = body[5:]
    assert len(payload) == length
    if kind == 1:
        payload = gzip.decompress(payload)
    return kind, aiserver_pb2.StreamUnifiedChatWithToolsRequest.FromString(payload).request
