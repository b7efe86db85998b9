"""
VibeSync desktop dashboard.

PyQt6 application that records short clips from the microphone, shows a
live frequency visualizer while recording, and talks to the VibeSync
server for analysis, chat, history and notes.
"""

from vibesync import __version__

__all__ = ["__version__"]
