"""Mapping between OpenAI function names and Cursor ``ClientSideToolV2`` ids.

The forward table is many-to-one: several caller-facing aliases collapse onto
the same remote id. The reverse table is kept separately and picks one
canonical name per id, so ``to_local(to_remote(name))`` is not guaranteed to
give back ``name``.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable

from . import aiserver_pb2
from .errors import UnsupportedTool

_T = aiserver_pb2.ClientSideToolV2

OPENAI_TO_CURSOR_TOOLS = MappingProxyType({
    "bash": _T.Value("CLIENT_SIDE_TOOL_V2_RUN_TERMINAL_COMMAND"),
    "run_terminal_command": _T.Value("CLIENT_SIDE_TOOL_V2_RUN_TERMINAL_COMMAND"),
    "run_terminal_command_v2": _T.Value("CLIENT_SIDE_TOOL_V2_RUN_TERMINAL_COMMAND_V2"),
    "read_file": _T.Value("CLIENT_SIDE_TOOL_V2_READ_FILE"),
    "write_file": _T.Value("CLIENT_SIDE_TOOL_V2_EDIT_FILE"),
    "create_file": _T.Value("CLIENT_SIDE_TOOL_V2_CREATE_FILE"),
    "edit_file": _T.Value("CLIENT_SIDE_TOOL_V2_EDIT_FILE"),
    "delete_file": _T.Value("CLIENT_SIDE_TOOL_V2_DELETE_FILE"),
    "list_dir": _T.Value("CLIENT_SIDE_TOOL_V2_LIST_DIR"),
    "file_search": _T.Value("CLIENT_SIDE_TOOL_V2_FILE_SEARCH"),
    "ripgrep_search": _T.Value("CLIENT_SIDE_TOOL_V2_RIPGREP_SEARCH"),
    "semantic_search": _T.Value("CLIENT_SIDE_TOOL_V2_SEMANTIC_SEARCH_FULL"),
    "web_search": _T.Value("CLIENT_SIDE_TOOL_V2_WEB_SEARCH"),
    "search_symbols": _T.Value("CLIENT_SIDE_TOOL_V2_SEARCH_SYMBOLS"),
})

CURSOR_TO_OPENAI_TOOLS = MappingProxyType({
    _T.Value("CLIENT_SIDE_TOOL_V2_RUN_TERMINAL_COMMAND"): "run_terminal_command",
    _T.Value("CLIENT_SIDE_TOOL_V2_RUN_TERMINAL_COMMAND_V2"): "run_terminal_command_v2",
    _T.Value("CLIENT_SIDE_TOOL_V2_READ_FILE"): "read_file",
    _T.Value("CLIENT_SIDE_TOOL_V2_EDIT_FILE"): "edit_file",
    _T.Value("CLIENT_SIDE_TOOL_V2_CREATE_FILE"): "create_file",
    _T.Value("CLIENT_SIDE_TOOL_V2_DELETE_FILE"): "delete_file",
    _T.Value("CLIENT_SIDE_TOOL_V2_LIST_DIR"): "list_dir",
    _T.Value("CLIENT_SIDE_TOOL_V2_FILE_SEARCH"): "file_search",
    _T.Value("CLIENT_SIDE_TOOL_V2_RIPGREP_SEARCH"): "ripgrep_search",
    _T.Value("CLIENT_SIDE_TOOL_V2_SEMANTIC_SEARCH_FULL"): "semantic_search",
    _T.Value("CLIENT_SIDE_TOOL_V2_WEB_SEARCH"): "web_search",
    _T.Value("CLIENT_SIDE_TOOL_V2_SEARCH_SYMBOLS"): "search_symbols",
})


def to_remote(name: str) -> int:
    """Return the remote capability id for ``name`` or raise ``UnsupportedTool``."""

    try:
        return OPENAI_TO_CURSOR_TOOLS[name]
    except KeyError:
        raise UnsupportedTool(name, OPENAI_TO_CURSOR_TOOLS.keys()) from None


def to_local(tool_id: int) -> str:
    """Best-effort reverse lookup; unknown ids come back as their lowercased string form."""

    name = CURSOR_TO_OPENAI_TOOLS.get(tool_id)
    if name is not None:
        return name
    return str(tool_id).lower()


def capability_set(names: Iterable[str]) -> list[int]:
    """Map tool names to distinct remote ids, keeping first-seen order."""

    out: list[int] = []
    for name in names:
        tool_id = to_remote(name)
        if tool_id not in out:
            out.append(tool_id)
    return out
