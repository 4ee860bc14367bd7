"""CLI entry point for toolchat-server.

This module provides the command-line interface for starting either of the
two processes: the session API (`toolchat-server api`) and the capability
provider (`toolchat-server provider`). It can be invoked as `toolchat-server`
(via the script entry point) or `python -m toolchat_server`.
"""

import argparse
import logging
import sys

import uvicorn

from toolchat_server import __version__, create_app
from toolchat_server.config import ToolchatSettings


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the `api` and `provider` subcommands."""
    parser = argparse.ArgumentParser(
        prog="toolchat-server",
        description="Model conversations driven through remotely discovered tools",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"toolchat-server {__version__}",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via TOOLCHAT_LOG_LEVEL)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    api = subparsers.add_parser("api", help="Run the session API server")
    api.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via TOOLCHAT_HOST)",
    )
    api.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 3002, can be set via TOOLCHAT_PORT)",
    )
    api.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via TOOLCHAT_OLLAMA_HOST)",
    )
    api.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model used for inference (default: llama3.2:latest, can be set via TOOLCHAT_MODEL)",
    )
    api.add_argument(
        "--provider-url",
        type=str,
        default=None,
        help="SSE endpoint of the capability provider (default: http://localhost:3001/sse, "
        "can be set via TOOLCHAT_PROVIDER_URL)",
    )

    provider = subparsers.add_parser("provider", help="Run the capability provider server")
    provider.add_argument(
        "--host",
        type=str,
        default=None,
        dest="provider_host",
        help="Host to bind the provider to (default: 127.0.0.1, can be set via TOOLCHAT_PROVIDER_HOST)",
    )
    provider.add_argument(
        "--port",
        type=int,
        default=None,
        dest="provider_port",
        help="Port to bind the provider to (default: 3001, can be set via TOOLCHAT_PROVIDER_PORT)",
    )

    return parser


def settings_from_args(args: argparse.Namespace) -> ToolchatSettings:
    """Build settings where CLI arguments override environment variables."""
    overrides = (
        "log_level",
        "host",
        "port",
        "ollama_host",
        "model",
        "provider_url",
        "provider_host",
        "provider_port",
    )
    settings_kwargs = {
        name: getattr(args, name)
        for name in overrides
        if getattr(args, name, None) is not None
    }
    return ToolchatSettings(**settings_kwargs)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the toolchat-server CLI.

    Parses command-line arguments and starts uvicorn with the application
    selected by the subcommand.
    """
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "provider":
        from toolchat_server.provider.app import create_provider_app

        app = create_provider_app(settings=settings)
        host, port = settings.provider_host, settings.provider_port
    else:
        app = create_app(settings=settings)
        host, port = settings.host, settings.port

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())
