"""
Dashboard configuration management for VibeSync.

Handles loading and saving dashboard configuration from:
- Platform-specific config directories
- Command line arguments

Saves use atomic writes (write to temp file, then rename).
"""

import os
import platform
from pathlib import Path
from typing import Any

import yaml


def get_config_dir() -> Path:
    """
    Get platform-specific configuration directory.

    Returns:
        Path to user config directory:
        - Linux: ~/.config/VibeSync/
        - Windows: ~/Documents/VibeSync/
        - macOS: ~/Library/Application Support/VibeSync/
    """
    system = platform.system()

    if system == "Windows":
        config_dir = Path.home() / "Documents" / "VibeSync"
    elif system == "Darwin":
        config_dir = Path.home() / "Library" / "Application Support" / "VibeSync"
    else:
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            config_dir = Path(xdg_config) / "VibeSync"
        else:
            config_dir = Path.home() / ".config" / "VibeSync"

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_default_config() -> dict[str, Any]:
    """Get default dashboard configuration."""
    return {
        "server": {
            "host": "localhost",
            "port": 3005,
            "use_https": False,
            "timeout": 30,
            "analysis_timeout": 180,
        },
        "recording": {
            "sample_rate": 44100,
            "device_index": None,
            "chunk_size": 1024,
        },
        "visualizer": {
            "fft_size": 256,
            "width": 600,
            "height": 200,
            "frame_interval_ms": 16,
        },
        "ui": {
            "language": "es",
        },
    }


class ClientConfig:
    """Dashboard configuration manager."""

    def __init__(self, config_path: Path | None = None):
        """
        Initialize dashboard configuration.

        Args:
            config_path: Optional path to config file
        """
        if config_path:
            self.config_path = Path(config_path)
        else:
            self.config_path = get_config_dir() / "dashboard.yaml"

        self.config = get_default_config()
        self._load()

    def _load(self) -> None:
        """Merge the config file, if any, over the defaults."""
        if self.config_path.exists():
            try:
                with open(self.config_path, encoding="utf-8") as f:
                    loaded = yaml.safe_load(f) or {}
                if isinstance(loaded, dict):
                    self._deep_merge(self.config, loaded)
                else:
                    print(f"Warning: Ignoring non-mapping config in {self.config_path}")
            except (OSError, yaml.YAMLError) as e:
                print(f"Warning: Could not load config: {e}")

    def _deep_merge(self, base: dict, override: dict) -> None:
        """Deep merge override into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def save(self) -> bool:
        """
        Save configuration to file with an atomic write.

        Writes to a temp file first, then renames it over the config file so
        an interrupted write never leaves a truncated config behind.
        """
        tmp_path = None
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

            tmp_path = self.config_path.with_suffix(".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(self.config, f, default_flow_style=False)

            os.replace(tmp_path, self.config_path)
            return True
        except OSError as e:
            print(f"Error saving config: {e}")
            if tmp_path and tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass
            return False

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a configuration value by path."""
        value = self.config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
            if value is None:
                return default
        return value

    def set(self, *keys: str, value: Any) -> None:
        """Set a configuration value by path."""
        d = self.config
        for key in keys[:-1]:
            if key not in d or not isinstance(d[key], dict):
                d[key] = {}
            d = d[key]
        d[keys[-1]] = value

    @property
    def server_host(self) -> str:
        """Get server hostname."""
        host = str(self.get("server", "host", default="localhost")).strip()
        for prefix in ("http://", "https://"):
            if host.startswith(prefix):
                host = host[len(prefix) :]
        return host.rstrip("/") or "localhost"

    @property
    def server_port(self) -> int:
        """Get server port."""
        return int(self.get("server", "port", default=3005))

    @property
    def use_https(self) -> bool:
        """Get HTTPS setting."""
        return bool(self.get("server", "use_https", default=False))

    @property
    def language(self) -> str:
        """Get the UI language ("en" or "es")."""
        language = self.get("ui", "language", default="es")
        return language if language in ("en", "es") else "es"
