"""
VibeSync server package.

Provides the REST API for analysis history and session notes, and proxies
audio analysis and chat requests to the Gemini API.
"""

from vibesync import __version__

__all__ = ["__version__"]
