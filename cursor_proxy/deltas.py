"""Output units produced by the response decoder."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class ThinkingChunk:
    text: str


@dataclass(frozen=True)
class AnswerChunk:
    text: str


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    arguments: str

    def to_openai(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


TranslatedDelta = Union[ThinkingChunk, AnswerChunk, ToolCall]


def reconstructed_text(deltas: list[TranslatedDelta]) -> str:
    """Join the thinking and answer channels in emission order."""

    return "".join(d.text for d in deltas if isinstance(d, (ThinkingChunk, AnswerChunk)))
