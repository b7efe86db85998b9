"""
VibeSync package.

Two halves share this distribution:
- vibesync.server: REST backend over a single-file SQLite store that also
  fronts the Gemini analysis and chat calls
- vibesync.dashboard: PyQt6 desktop app with microphone capture, the live
  frequency visualizer and the Analyzer/Dashboard/History/Notes views
"""

from pathlib import Path


def _get_version() -> str:
    """
    Get the package version from installed metadata or pyproject.toml.

    Returns:
        Version string (e.g., "0.1.0") or "dev" if unavailable
    """
    # First try importlib.metadata (works when package is installed)
    try:
        from importlib.metadata import version

        return version("vibesync")
    except Exception:
        pass

    # Fallback: read from pyproject.toml
    try:
        import tomllib

        current = Path(__file__).resolve()
        for parent in current.parents:
            potential_path = parent / "pyproject.toml"
            if potential_path.exists():
                with open(potential_path, "rb") as f:
                    data = tomllib.load(f)
                return data.get("project", {}).get("version", "dev")
    except Exception:
        pass

    return "dev"


__version__ = _get_version()
