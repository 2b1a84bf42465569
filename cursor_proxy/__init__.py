"""OpenAI-compatible proxy for the Cursor chat service."""

__version__ = "0.1.0"
