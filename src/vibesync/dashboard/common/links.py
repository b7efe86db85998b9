"""
Link-out helpers for recommended tracks.
"""

from urllib.parse import quote

YOUTUBE_SEARCH_URL = "https://www.youtube.com/results?search_query="


def youtube_search_url(artist: str, title: str) -> str:
    """Build a YouTube search URL for the official audio of a track."""
    # safe set matches JavaScript's encodeURIComponent
    query = quote(f"{artist} {title} official audio", safe="-_.!~*'()")
    return f"{YOUTUBE_SEARCH_URL}{query}"
