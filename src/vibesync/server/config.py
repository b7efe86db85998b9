"""
Server configuration management for VibeSync.

Handles loading configuration from YAML files.
Provides typed configuration access for all server components.

Configuration Priority (highest to lowest):
    1. Explicit path passed to ServerConfig / get_config
    2. User config: ~/.config/VibeSync/config.yaml (Linux/macOS)
                    or Documents/VibeSync/config.yaml (Windows)
    3. Packaged default: vibesync/server/config.yaml
    4. Fallback: ./config.yaml (current directory)
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_PORT = 3005
DEFAULT_MODEL = "gemini-2.5-flash"
PLACEHOLDER_API_KEY = "PLACEHOLDER"


def get_user_config_dir() -> Path:
    """
    Get the user configuration directory based on platform.

    Returns:
        Path to user config directory:
        - Linux/macOS: $XDG_CONFIG_HOME/VibeSync/ or ~/.config/VibeSync/
        - Windows: ~/Documents/VibeSync/
    """
    if sys.platform == "win32":
        return Path.home() / "Documents" / "VibeSync"

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "VibeSync"
    return Path.home() / ".config" / "VibeSync"


class ServerConfig:
    """
    Server configuration manager.

    Loads configuration from YAML file.
    User config takes precedence over the packaged default.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file. If None, searches in priority order.
        """
        self.config: Dict[str, Any] = {}
        self._config_path = Path(config_path) if config_path else None
        self._loaded_from: Optional[Path] = None
        self._load_config()

    def _find_config_candidates(self) -> list[Path]:
        """Return readable config file candidates in priority order."""
        if self._config_path:
            candidates = [self._config_path]
        else:
            candidates = [
                get_user_config_dir() / "config.yaml",
                Path(__file__).parent / "config.yaml",
                Path.cwd() / "config.yaml",
            ]

        readable: list[Path] = []
        for path in candidates:
            if not (path.exists() and path.is_file()):
                continue
            try:
                with path.open("r", encoding="utf-8"):
                    pass
                readable.append(path)
            except (PermissionError, OSError):
                continue

        return readable

    def _load_config(self) -> None:
        """Load configuration from the first candidate that parses."""
        candidates = self._find_config_candidates()

        if not candidates:
            raise RuntimeError(
                "No configuration file found. "
                "Expected one of:\n"
                f"  - {get_user_config_dir() / 'config.yaml'} (user config)\n"
                f"  - {Path(__file__).parent / 'config.yaml'} (packaged default)\n"
                "  - ./config.yaml (current directory)"
            )

        errors: list[tuple[Path, Exception]] = []
        for config_file in candidates:
            try:
                with config_file.open("r", encoding="utf-8") as f:
                    loaded = yaml.safe_load(f) or {}
                if not isinstance(loaded, dict):
                    raise yaml.YAMLError("top-level YAML value must be a mapping")
                self.config = loaded
                self._loaded_from = config_file
                if errors:
                    print(
                        "WARNING: Skipped invalid config file(s): "
                        + ", ".join(str(path) for path, _ in errors)
                    )
                return
            except (yaml.YAMLError, OSError) as e:
                print(f"ERROR: Could not load config file {config_file}: {e}")
                errors.append((config_file, e))
                if self._config_path:
                    break

        details = "\n".join(f"  - {path}: {err}" for path, err in errors)
        raise RuntimeError("Failed to load configuration. Tried:\n" + details)

    @property
    def loaded_from(self) -> Optional[Path]:
        """Return the path of the loaded configuration file."""
        return self._loaded_from

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get a configuration value by nested key path.

        Supports nested key access with multiple arguments:
            config.get("ai", "model")  # Returns config["ai"]["model"]
            config.get("logging", "level", default="INFO")  # Nested with default
            config.get("database", default={})  # Single key with default

        Args:
            *keys: One or more string configuration keys for nested access
            default: Default value to return if any key in the path is not found

        Returns:
            Configuration value at the specified path, or default if not found

        Raises:
            TypeError: If any key argument is not a string
        """
        if not keys:
            return self.config

        # Catches the cfg.get("key", {}) mistake early
        for i, key in enumerate(keys):
            if not isinstance(key, str):
                raise TypeError(
                    f"All configuration keys must be strings, got {type(key).__name__} "
                    f"for keys[{i}]: {repr(key)}. "
                    f"If you want to provide a default value, use the 'default=' keyword argument: "
                    f"cfg.get({', '.join(repr(k) for k in keys[:i] if isinstance(k, str))}, default={repr(key)})"
                )

        value: Any = self.config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
            if value is None:
                return default
        return value

    @property
    def server(self) -> Dict[str, Any]:
        """Get HTTP server configuration."""
        return self.config.get("server") or {}

    @property
    def database(self) -> Dict[str, Any]:
        """Get database configuration."""
        return self.config.get("database") or {}

    @property
    def logging(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self.config.get("logging") or {}

    @property
    def ai(self) -> Dict[str, Any]:
        """Get generative AI (Gemini) configuration."""
        return self.config.get("ai") or {}


def _non_empty_string(value: Any) -> Optional[str]:
    """Return a trimmed string only when value is a non-empty string."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed if trimmed else None


def resolve_api_key(config: ServerConfig) -> Optional[str]:
    """
    Resolve the Gemini API key.

    Config value wins, then GEMINI_API_KEY, then API_KEY. The literal
    placeholder value counts as missing.
    """
    candidates = (
        config.get("ai", "api_key"),
        os.environ.get("GEMINI_API_KEY"),
        os.environ.get("API_KEY"),
    )
    for candidate in candidates:
        key = _non_empty_string(candidate)
        if key and key != PLACEHOLDER_API_KEY:
            return key
    return None


# Global config instance
_config: Optional[ServerConfig] = None


def get_config(config_path: Optional[Path] = None) -> ServerConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig(config_path)
    return _config


def reset_config() -> None:
    """Drop the global configuration instance so the next call reloads it."""
    global _config
    _config = None
