# -*- coding: utf-8 -*-
# Generated by the protocol buffer compiler.  DO NOT EDIT!
# source: cursor_proxy/aiserver.proto
"""Generated protocol buffer code."""
from google.protobuf.internal import builder as _builder
from google.protobuf import descriptor as _descriptor
from google.protobuf import descriptor_pool as _descriptor_pool
from google.protobuf import symbol_database as _symbol_database
# @@protoc_insertion_point(imports)

_sym_db = _symbol_database.Default()




DESCRIPTOR = _descriptor_pool.Default().AddSerializedFile(b'\n\x1b\x63ursor_proxy/aiserver.proto\x12\x0b\x61iserver.v1\"\x95\x11\n!StreamUnifiedChatWithToolsRequest\x12G\n\x07request\x18\x01 \x01(\x0b\x32\x36.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request\x1a\xa6\x10\n\x07Request\x12P\n\x08messages\x18\x01 \x03(\x0b\x32>.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.Message\x12\x10\n\x08unknown2\x18\x02 \x01(\x05\x12W\n\x0binstruction\x18\x03 \x01(\x0b\x32\x42.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.Instruction\x12\x10\n\x08unknown4\x18\x04 \x01(\x05\x12K\n\x05model\x18\x05 \x01(\x0b\x32<.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.Model\x12\x10\n\x08web_tool\x18\x08 \x01(\t\x12\x11\n\tunknown13\x18\r \x01(\x05\x12\\\n\x0e\x63ursor_setting\x18\x0f \x01(\x0b\x32\x44.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.CursorSetting\x12\x11\n\tunknown19\x18\x13 \x01(\x05\x12\x17\n\x0f\x63onversation_id\x18\x17 \x01(\t\x12Q\n\x08metadata\x18\x1a \x01(\x0b\x32?.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.Metadata\x12\x11\n\tunknown27\x18\x1b \x01(\x05\x12;\n\x14\x63lient_side_tool_v2s\x18\x1d \x03(\x0e\x32\x1d.aiserver.v1.ClientSideToolV2\x12U\n\x0bmessage_ids\x18\x1e \x03(\x0b\x32@.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.MessageId\x12\x15\n\rlarge_context\x18# \x01(\x05\x12\x11\n\tunknown38\x18& \x01(\x05\x12\x16\n\x0e\x63hat_mode_enum\x18. \x01(\x05\x12\x11\n\tunknown47\x18/ \x01(\t\x12\x11\n\tunknown48\x18\x30 \x01(\x05\x12\x11\n\tunknown49\x18\x31 \x01(\x05\x12\x11\n\tunknown51\x18\x33 \x01(\x05\x12\x11\n\tunknown53\x18\x35 \x01(\x05\x12\x11\n\tchat_mode\x18\x36 \x01(\t\x12\x13\n\x0btool_choice\x18\x37 \x01(\t\x1a\xc0\x05\n\x07Message\x12\x0f\n\x07\x63ontent\x18\x01 \x01(\t\x12\x0c\n\x04role\x18\x02 \x01(\x05\x12\x12\n\nmessage_id\x18\r \x01(\t\x12_\n\x0ctool_results\x18\x12 \x03(\x0b\x32I.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.Message.ToolResult\x12\x12\n\nsummary_id\x18  \x01(\t\x12W\n\x07summary\x18\' \x01(\x0b\x32\x46.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.Message.Summary\x12Y\n\x08thinking\x18- \x01(\x0b\x32G.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.Message.Thinking\x12\x16\n\x0e\x63hat_mode_enum\x18/ \x01(\x05\x12[\n\ntool_calls\x18\x30 \x03(\x0b\x32G.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.Message.ToolCall\x1a\x1a\n\x07Summary\x12\x0f\n\x07\x63ontent\x18\x01 \x01(\t\x1a\x1b\n\x08Thinking\x12\x0f\n\x07\x63ontent\x18\x01 \x01(\t\x1a\x45\n\nToolResult\x12\x14\n\x0ctool_call_id\x18\x01 \x01(\t\x12\x11\n\ttool_name\x18\x02 \x01(\t\x12\x0e\n\x06result\x18\x08 \x01(\t\x1a\x64\n\x08ToolCall\x12\n\n\x02id\x18\x01 \x01(\t\x12+\n\x04tool\x18\x02 \x01(\x0e\x32\x1d.aiserver.v1.ClientSideToolV2\x12\x0c\n\x04name\x18\x03 \x01(\t\x12\x11\n\targuments\x18\x04 \x01(\t\x1a\"\n\x0bInstruction\x12\x13\n\x0binstruction\x18\x01 \x01(\t\x1a$\n\x05Model\x12\x0c\n\x04name\x18\x01 \x01(\t\x12\r\n\x05\x65mpty\x18\x04 \x01(\x0c\x1a\xe4\x01\n\rCursorSetting\x12\x0c\n\x04name\x18\x01 \x01(\t\x12\x10\n\x08unknown3\x18\x03 \x01(\x0c\x12_\n\x08unknown6\x18\x06 \x01(\x0b\x32M.aiserver.v1.StreamUnifiedChatWithToolsRequest.Request.CursorSetting.Unknown6\x12\x10\n\x08unknown8\x18\x08 \x01(\x05\x12\x10\n\x08unknown9\x18\t \x01(\x05\x1a.\n\x08Unknown6\x12\x10\n\x08unknown1\x18\x01 \x01(\x0c\x12\x10\n\x08unknown2\x18\x02 \x01(\x0c\x1aV\n\x08Metadata\x12\n\n\x02os\x18\x01 \x01(\t\x12\x0c\n\x04\x61rch\x18\x02 \x01(\t\x12\x0f\n\x07version\x18\x03 \x01(\t\x12\x0c\n\x04path\x18\x04 \x01(\t\x12\x11\n\ttimestamp\x18\x05 \x01(\t\x1a\x41\n\tMessageId\x12\x12\n\nmessage_id\x18\x01 \x01(\t\x12\x12\n\nsummary_id\x18\x02 \x01(\t\x12\x0c\n\x04role\x18\x03 \x01(\x05\"\xc6\x04\n\"StreamUnifiedChatWithToolsResponse\x12\x66\n\x18\x63lient_side_tool_v2_call\x18\x01 \x01(\x0b\x32\x44.aiserver.v1.StreamUnifiedChatWithToolsResponse.ClientSideToolV2Call\x12H\n\x07message\x18\x02 \x01(\x0b\x32\x37.aiserver.v1.StreamUnifiedChatWithToolsResponse.Message\x12H\n\x07summary\x18\x03 \x01(\x0b\x32\x37.aiserver.v1.StreamUnifiedChatWithToolsResponse.Summary\x1az\n\x14\x43lientSideToolV2Call\x12+\n\x04tool\x18\x01 \x01(\x0e\x32\x1d.aiserver.v1.ClientSideToolV2\x12\x14\n\x0ctool_call_id\x18\x03 \x01(\t\x12\x0c\n\x04name\x18\t \x01(\t\x12\x11\n\targuments\x18\n \x01(\t\x1a\x8b\x01\n\x07Message\x12\x0f\n\x07\x63ontent\x18\x01 \x01(\t\x12R\n\x08thinking\x18\x19 \x01(\x0b\x32@.aiserver.v1.StreamUnifiedChatWithToolsResponse.Message.Thinking\x1a\x1b\n\x08Thinking\x12\x0f\n\x07\x63ontent\x18\x01 \x01(\t\x1a\x1a\n\x07Summary\x12\x0f\n\x07\x63ontent\x18\x01 \x01(\t\"\x93\x01\n\x17\x41vailableModelsResponse\x12\x13\n\x0bmodel_names\x18\x01 \x03(\t\x12\x43\n\x06models\x18\x02 \x03(\x0b\x32\x33.aiserver.v1.AvailableModelsResponse.AvailableModel\x1a\x1e\n\x0e\x41vailableModel\x12\x0c\n\x04name\x18\x01 \x01(\t*\xb2\x07\n\x10\x43lientSideToolV2\x12#\n\x1f\x43LIENT_SIDE_TOOL_V2_UNSPECIFIED\x10\x00\x12,\n(CLIENT_SIDE_TOOL_V2_READ_SEMSEARCH_FILES\x10\x01\x12-\n)CLIENT_SIDE_TOOL_V2_READ_FILE_FOR_IMPORTS\x10\x02\x12&\n\"CLIENT_SIDE_TOOL_V2_RIPGREP_SEARCH\x10\x03\x12,\n(CLIENT_SIDE_TOOL_V2_RUN_TERMINAL_COMMAND\x10\x04\x12!\n\x1d\x43LIENT_SIDE_TOOL_V2_READ_FILE\x10\x05\x12 \n\x1c\x43LIENT_SIDE_TOOL_V2_LIST_DIR\x10\x06\x12!\n\x1d\x43LIENT_SIDE_TOOL_V2_EDIT_FILE\x10\x07\x12#\n\x1f\x43LIENT_SIDE_TOOL_V2_FILE_SEARCH\x10\x08\x12,\n(CLIENT_SIDE_TOOL_V2_SEMANTIC_SEARCH_FULL\x10\t\x12#\n\x1f\x43LIENT_SIDE_TOOL_V2_CREATE_FILE\x10\n\x12#\n\x1f\x43LIENT_SIDE_TOOL_V2_DELETE_FILE\x10\x0b\x12\x1f\n\x1b\x43LIENT_SIDE_TOOL_V2_REAPPLY\x10\x0c\x12)\n%CLIENT_SIDE_TOOL_V2_GET_RELATED_FILES\x10\r\x12&\n\"CLIENT_SIDE_TOOL_V2_PARALLEL_APPLY\x10\x0e\x12/\n+CLIENT_SIDE_TOOL_V2_RUN_TERMINAL_COMMAND_V2\x10\x0f\x12#\n\x1f\x43LIENT_SIDE_TOOL_V2_FETCH_RULES\x10\x10\x12\x1f\n\x1b\x43LIENT_SIDE_TOOL_V2_PLANNER\x10\x11\x12\"\n\x1e\x43LIENT_SIDE_TOOL_V2_WEB_SEARCH\x10\x12\x12\x1b\n\x17\x43LIENT_SIDE_TOOL_V2_MCP\x10\x13\x12\"\n\x1e\x43LIENT_SIDE_TOOL_V2_WEB_VIEWER\x10\x14\x12$\n CLIENT_SIDE_TOOL_V2_DIFF_HISTORY\x10\x15\x12#\n\x1f\x43LIENT_SIDE_TOOL_V2_IMPLEMENTER\x10\x16\x12&\n\"CLIENT_SIDE_TOOL_V2_SEARCH_SYMBOLS\x10\x17\x62\x06proto3')

_builder.BuildMessageAndEnumDescriptors(DESCRIPTOR, globals())
_builder.BuildTopDescriptorsAndMessages(DESCRIPTOR, 'cursor_proxy.aiserver_pb2', globals())
if _descriptor._USE_C_DESCRIPTORS == False:

  DESCRIPTOR._options = None
  _CLIENTSIDETOOLV2._serialized_start=2980
  _CLIENTSIDETOOLV2._serialized_end=3926
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST._serialized_start=45
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST._serialized_end=2242
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST._serialized_start=156
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST._serialized_end=2242
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGE._serialized_start=1078
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGE._serialized_end=1782
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGE_SUMMARY._serialized_start=1554
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGE_SUMMARY._serialized_end=1580
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGE_THINKING._serialized_start=1582
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGE_THINKING._serialized_end=1609
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGE_TOOLRESULT._serialized_start=1611
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGE_TOOLRESULT._serialized_end=1680
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGE_TOOLCALL._serialized_start=1682
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGE_TOOLCALL._serialized_end=1782
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_INSTRUCTION._serialized_start=1784
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_INSTRUCTION._serialized_end=1818
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MODEL._serialized_start=1820
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MODEL._serialized_end=1856
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_CURSORSETTING._serialized_start=1859
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_CURSORSETTING._serialized_end=2087
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_CURSORSETTING_UNKNOWN6._serialized_start=2041
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_CURSORSETTING_UNKNOWN6._serialized_end=2087
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_METADATA._serialized_start=2089
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_METADATA._serialized_end=2175
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGEID._serialized_start=2177
  _STREAMUNIFIEDCHATWITHTOOLSREQUEST_REQUEST_MESSAGEID._serialized_end=2242
  _STREAMUNIFIEDCHATWITHTOOLSRESPONSE._serialized_start=2245
  _STREAMUNIFIEDCHATWITHTOOLSRESPONSE._serialized_end=2827
  _STREAMUNIFIEDCHATWITHTOOLSRESPONSE_CLIENTSIDETOOLV2CALL._serialized_start=2535
  _STREAMUNIFIEDCHATWITHTOOLSRESPONSE_CLIENTSIDETOOLV2CALL._serialized_end=2657
  _STREAMUNIFIEDCHATWITHTOOLSRESPONSE_MESSAGE._serialized_start=2660
  _STREAMUNIFIEDCHATWITHTOOLSRESPONSE_MESSAGE._serialized_end=2799
  _STREAMUNIFIEDCHATWITHTOOLSRESPONSE_MESSAGE_THINKING._serialized_start=1582
  _STREAMUNIFIEDCHATWITHTOOLSRESPONSE_MESSAGE_THINKING._serialized_end=1609
  _STREAMUNIFIEDCHATWITHTOOLSRESPONSE_SUMMARY._serialized_start=1554
  _STREAMUNIFIEDCHATWITHTOOLSRESPONSE_SUMMARY._serialized_end=1580
  _AVAILABLEMODELSRESPONSE._serialized_start=2830
  _AVAILABLEMODELSRESPONSE._serialized_end=2977
  _AVAILABLEMODELSRESPONSE_AVAILABLEMODEL._serialized_start=2947
  _AVAILABLEMODELSRESPONSE_AVAILABLEMODEL._serialized_end=2977
# @@protoc_insertion_point(module_scope)
