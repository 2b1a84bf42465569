"""Entry points for launching the FastAPI proxy via uvicorn."""
from __future__ import annotations

import argparse
import logging

import uvicorn

from .app import create_app
from .config import CREDENTIAL_SOURCES, TOOL_MODES, ProxySettings


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3010
DEFAULT_DEBUG_PATH = "/tmp/debug_cursorproxy.log"


logger = logging.getLogger(__name__)


def _resolve_debug_settings(debug_arg: str | None, current_path: str | None) -> tuple[bool, str]:
    """Return debug enabled flag and chosen path based on CLI input."""

    if not debug_arg:
        return bool(current_path), current_path or DEFAULT_DEBUG_PATH

    candidate = debug_arg.strip() if isinstance(debug_arg, str) else ""
    path = candidate or DEFAULT_DEBUG_PATH
    return True, path


def _build_settings(args: argparse.Namespace) -> ProxySettings:
    """Construct ProxySettings from environment defaults overridden by CLI arguments."""

    settings = ProxySettings()
    settings.host = args.host or settings.host or DEFAULT_HOST
    settings.port = args.port or settings.port or DEFAULT_PORT
    if args.tool_mode:
        settings.tool_mode = args.tool_mode
    if args.credentials:
        settings.credential_source = args.credentials
    if args.proxy:
        settings.outbound_proxy = args.proxy

    debug_enabled, debug_path = _resolve_debug_settings(args.debug, settings.debug_sse_path)
    settings.debug_sse_enabled = debug_enabled
    settings.debug_sse_path = debug_path
    return settings


def _log_configuration(settings: ProxySettings) -> None:
    """Emit a concise summary of the active configuration values."""

    debug_display = settings.debug_sse_path if settings.debug_sse_enabled else "disabled"
    logger.info("Initializing Cursor OpenAI Proxy ...")
    logger.info(
        "✓ Loaded configuration host=%s port=%s upstream=%s tool_mode=%s credentials=%s debug=%s",
        settings.host,
        settings.port,
        settings.upstream_base_url,
        settings.tool_mode,
        settings.credential_source,
        debug_display,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Cursor OpenAI proxy server")
    parser.add_argument("--host", default=None, help="Host interface to bind")
    parser.add_argument("--port", type=int, default=None, help="Port to bind")
    parser.add_argument(
        "--tool-mode",
        choices=TOOL_MODES,
        default=None,
        help="native: map tools to Cursor capabilities; prompt: describe tools in the prompt",
    )
    parser.add_argument(
        "--credentials",
        choices=CREDENTIAL_SOURCES,
        default=None,
        help="Where to find the Cursor token when requests carry no bearer header",
    )
    parser.add_argument("--proxy", default=None, help="Outbound HTTP proxy URL")
    parser.add_argument(
        "--debug",
        metavar="PATH",
        nargs="?",
        const=DEFAULT_DEBUG_PATH,
        default=None,
        help="Enable frame debug logging and write to PATH",
    )
    parser.add_argument("--log-level", default="info", help="Logging level")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(message)s")
    try:
        settings = _build_settings(args)
    except ValueError as err:
        logger.error("[!] Configuration error: %s", err)
        raise SystemExit(1)

    _log_configuration(settings)

    uvicorn.run(
        create_app(settings),
        host=settings.host or DEFAULT_HOST,
        port=settings.port or DEFAULT_PORT,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    run()
