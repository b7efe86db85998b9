"""
Command-line entry point for the VibeSync server.

Usage:
    python -m vibesync.server [--config PATH] [--host HOST] [--port PORT]
"""

import argparse
from pathlib import Path

import uvicorn

from vibesync.server.config import DEFAULT_PORT, get_config


def main() -> None:
    """Main entrypoint."""
    parser = argparse.ArgumentParser(description="VibeSync API server")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--host", help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, help="Port (overrides config)")
    parser.add_argument(
        "--log-level", default="info", help="Uvicorn log level (default: info)"
    )
    args = parser.parse_args()

    config = get_config(args.config)
    host = args.host or config.get("server", "host", default="127.0.0.1")
    port = args.port or int(config.get("server", "port", default=DEFAULT_PORT))

    from vibesync.server.api.main import create_app

    print(f"VibeSync server listening on http://{host}:{port}")
    if config.loaded_from:
        print(f"  - Config: {config.loaded_from}")

    uvicorn.run(
        create_app(args.config),
        host=host,
        port=port,
        log_level=args.log_level,
        access_log=True,
    )


if __name__ == "__main__":
    main()
