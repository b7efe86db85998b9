#!/usr/bin/env python3
"""
VibeSync dashboard entry point.

Usage:
    python -m vibesync.dashboard [options]

Options:
    --host HOST          Server hostname (default: localhost)
    --port PORT          Server port (default: 3005)
    --https              Use HTTPS
    --config PATH        Path to configuration file
    --language {en,es}   Interface language
    --verbose, -v        Enable verbose debug logging
    --list-devices       List available audio devices and exit
"""

import argparse
import logging
import sys
from pathlib import Path

from vibesync.dashboard import __version__
from vibesync.dashboard.common.audio_recorder import AudioRecorder
from vibesync.dashboard.common.config import ClientConfig, get_config_dir
from vibesync.dashboard.common.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="VibeSync Dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", type=str, help="Server hostname")
    parser.add_argument("--port", type=int, help="Server port")
    parser.add_argument("--https", action="store_true", help="Use HTTPS connection")
    parser.add_argument("--config", type=str, help="Path to configuration file")
    parser.add_argument(
        "--language", choices=["en", "es"], help="Interface language"
    )
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List available audio devices and exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose debug logging",
    )
    return parser.parse_args(argv)


def list_audio_devices() -> None:
    """List available audio input devices."""
    print("\nAvailable Audio Input Devices:")
    print("-" * 50)

    devices = AudioRecorder.list_devices()
    if not devices:
        print("No audio input devices found.")
        print("Install PyAudio:")
        print("  Arch: sudo pacman -S python-pyaudio")
        print("  Ubuntu/Debian: sudo apt install python3-pyaudio")
        print("  Fedora: sudo dnf install python3-pyaudio")
        return

    for device in devices:
        print(f"  [{device['index']}] {device['name']}")
        print(
            f"      Channels: {device['channels']}, Sample Rate: {device['sample_rate']}"
        )

    print()


def apply_overrides(config: ClientConfig, args: argparse.Namespace) -> None:
    """Apply command line overrides to the loaded configuration."""
    if args.host:
        config.set("server", "host", value=args.host)
    if args.port:
        config.set("server", "port", value=args.port)
    if args.https:
        config.set("server", "use_https", value=True)
    if args.language:
        config.set("ui", "language", value=args.language)


def run_dashboard(config: ClientConfig) -> int:
    """Start the Qt application and block until the window closes."""
    from PyQt6.QtWidgets import QApplication

    from vibesync.dashboard.window import MainWindow

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("VibeSync")
    app.setApplicationVersion(__version__)

    window = MainWindow(config)
    window.show()
    return app.exec()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.list_devices:
        list_audio_devices()
        return 0

    try:
        setup_logging(verbose=args.verbose, component="dashboard", wipe_on_startup=True)
    except OSError as e:
        print(f"WARNING: Failed to set up logging: {e}", file=sys.stderr)

    config = ClientConfig(Path(args.config) if args.config else None)
    apply_overrides(config, args)

    print(f"\nVibeSync Dashboard v{__version__}")
    print(f"Config directory: {get_config_dir()}")
    print(f"Server: {config.server_host}:{config.server_port}")
    print()

    try:
        return run_dashboard(config)
    except ImportError as e:
        logger.error(f"PyQt6 not available: {e}")
        print("Error: PyQt6 is required. Install with: pip install PyQt6")
        return 1
    except RuntimeError as e:
        logger.error(f"Dashboard initialization failed: {e}")
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
