"""
Figures for the Vibe Stats view, derived from the analysis history.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from vibesync.dashboard.common.models import AudioAnalysis

TOP_GENRE_LIMIT = 5
NOT_AVAILABLE = "N/A"

# Bar colors for the top genres chart, cycled by rank
GENRE_COLORS = ("#b026ff", "#00ff9d", "#00f0ff", "#ff0055", "#ffffff")


@dataclass(frozen=True)
class GenreCount:
    name: str
    value: int


@dataclass(frozen=True)
class MoodPoint:
    subject: str
    value: int
    full_mark: int


@dataclass(frozen=True)
class DashboardStats:
    top_genres: tuple[GenreCount, ...]
    mood_spectrum: tuple[MoodPoint, ...]
    total_scans: int
    latest_vibe: str
    top_mood: str


def top_genres(
    history: Sequence[AudioAnalysis], limit: int = TOP_GENRE_LIMIT
) -> list[GenreCount]:
    """Most frequent genres, highest count first. Ties keep first-seen order."""
    counts = Counter(analysis.detected_genre for analysis in history)
    # Counter preserves insertion order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [GenreCount(name, value) for name, value in ranked[:limit]]


def mood_spectrum(history: Sequence[AudioAnalysis]) -> list[MoodPoint]:
    """Per-mood counts in first-seen order, scaled against max + 2."""
    counts = Counter(analysis.mood for analysis in history)
    if not counts:
        return []
    full_mark = max(counts.values()) + 2
    return [MoodPoint(mood, value, full_mark) for mood, value in counts.items()]


def compute_stats(history: Sequence[AudioAnalysis]) -> DashboardStats:
    """
    Compute all dashboard figures.

    ``history`` is expected newest first, so the latest vibe is the genre of
    its first entry.
    """
    moods = mood_spectrum(history)
    ranked_moods = sorted(moods, key=lambda point: point.value, reverse=True)

    return DashboardStats(
        top_genres=tuple(top_genres(history)),
        mood_spectrum=tuple(moods),
        total_scans=len(history),
        latest_vibe=(history[0].detected_genre or NOT_AVAILABLE) if history else NOT_AVAILABLE,
        top_mood=ranked_moods[0].subject if ranked_moods else NOT_AVAILABLE,
    )
