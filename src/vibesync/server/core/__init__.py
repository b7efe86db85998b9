"""
Core AI components.

This module contains:
- gemini_client: Gemini REST adapter for vibe analysis and the chat assistant
"""


# Lazy imports to keep httpx out of module import time
def __getattr__(name: str):
    if name == "GeminiClient":
        from vibesync.server.core.gemini_client import GeminiClient

        return GeminiClient
    elif name == "GeminiError":
        from vibesync.server.core.gemini_client import GeminiError

        return GeminiError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["GeminiClient", "GeminiError"]
