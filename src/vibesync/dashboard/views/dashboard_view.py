"""
Vibe Stats view: summary figures, top genres and the mood spectrum.
"""

import math

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QPainter, QPen, QPolygonF
from PyQt6.QtWidgets import QGridLayout, QHBoxLayout, QVBoxLayout, QWidget

from vibesync.dashboard.common.models import AppStateSnapshot
from vibesync.dashboard.common.stats import (
    GENRE_COLORS,
    DashboardStats,
    GenreCount,
    MoodPoint,
    compute_stats,
)
from vibesync.dashboard.common.translations import translate
from vibesync.dashboard.styles import NEON_BLUE, NEON_PURPLE
from vibesync.dashboard.views.utils import clear_layout, make_card, make_label


class GenreBarChart(QWidget):
    """Horizontal bars, one per genre, longest for the highest count."""

    ROW_HEIGHT = 36
    LABEL_WIDTH = 110

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self._genres: list[GenreCount] = []
        self.setMinimumHeight(self.ROW_HEIGHT)

    def set_data(self, genres: list[GenreCount]) -> None:
        self._genres = list(genres)
        self.setMinimumHeight(max(1, len(self._genres)) * self.ROW_HEIGHT)
        self.update()

    def paintEvent(self, event) -> None:
        if not self._genres:
            return
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            highest = max(g.value for g in self._genres)
            bar_space = max(1, self.width() - self.LABEL_WIDTH - 10)

            for i, genre in enumerate(self._genres):
                y = i * self.ROW_HEIGHT
                painter.setPen(QColor("#9ca3af"))
                painter.drawText(
                    QRectF(0, y, self.LABEL_WIDTH - 8, self.ROW_HEIGHT),
                    Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignRight,
                    genre.name,
                )
                width = bar_space * genre.value / highest
                painter.setPen(Qt.PenStyle.NoPen)
                painter.setBrush(QBrush(QColor(GENRE_COLORS[i % len(GENRE_COLORS)])))
                painter.drawRoundedRect(
                    QRectF(self.LABEL_WIDTH, y + 8, width, self.ROW_HEIGHT - 16), 4, 4
                )
        finally:
            painter.end()


class MoodRadarChart(QWidget):
    """Radar chart of mood counts, each axis scaled to its full mark."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self._points: list[MoodPoint] = []
        self.setMinimumHeight(260)

    def set_data(self, points: list[MoodPoint]) -> None:
        self._points = list(points)
        self.update()

    def paintEvent(self, event) -> None:
        if not self._points:
            return
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            center = QPointF(self.width() / 2, self.height() / 2)
            radius = min(self.width(), self.height()) / 2 - 40
            count = len(self._points)

            def axis_point(index: int, fraction: float) -> QPointF:
                angle = -math.pi / 2 + 2 * math.pi * index / count
                return QPointF(
                    center.x() + math.cos(angle) * radius * fraction,
                    center.y() + math.sin(angle) * radius * fraction,
                )

            painter.setPen(QPen(QColor(255, 255, 255, 30), 1))
            for ring in (0.25, 0.5, 0.75, 1.0):
                painter.drawPolygon(
                    QPolygonF([axis_point(i, ring) for i in range(count)])
                )

            painter.setFont(QFont(painter.font().family(), 9))
            for i, point in enumerate(self._points):
                painter.setPen(QPen(QColor(255, 255, 255, 30), 1))
                painter.drawLine(center, axis_point(i, 1.0))
                painter.setPen(QColor("#9ca3af"))
                label_at = axis_point(i, 1.15)
                painter.drawText(
                    QRectF(label_at.x() - 50, label_at.y() - 10, 100, 20),
                    Qt.AlignmentFlag.AlignCenter,
                    point.subject,
                )

            shape = QPolygonF(
                [
                    axis_point(i, point.value / point.full_mark)
                    for i, point in enumerate(self._points)
                ]
            )
            fill = QColor(NEON_PURPLE)
            fill.setAlpha(150)
            painter.setPen(QPen(QColor(NEON_PURPLE), 2))
            painter.setBrush(QBrush(fill))
            painter.drawPolygon(shape)
        finally:
            painter.end()


class DashboardView(QWidget):
    """Aggregate statistics over the analysis history."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self._rendered_key: tuple | None = None
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(20)

    def render(self, state: AppStateSnapshot) -> None:
        key = (state.language, tuple(a.id for a in state.history))
        if key == self._rendered_key:
            return
        self._rendered_key = key

        def t(k: str) -> str:
            return translate(state.language, k)

        clear_layout(self._layout)

        if not state.history:
            card, layout = make_card()
            title = make_label(t("no_data"), "cardTitle")
            title.setAlignment(Qt.AlignmentFlag.AlignCenter)
            layout.addWidget(title)
            sub = make_label(t("no_data_sub"), "mutedLabel")
            sub.setAlignment(Qt.AlignmentFlag.AlignCenter)
            layout.addWidget(sub)
            self._layout.addWidget(card)
            self._layout.addStretch()
            return

        stats = compute_stats(state.history)
        self._layout.addLayout(self._create_summary(stats, t))

        charts = QHBoxLayout()
        charts.setSpacing(20)

        genre_card, genre_layout = make_card()
        genre_layout.addWidget(make_label(t("top_genres"), "cardTitle"))
        genre_chart = GenreBarChart()
        genre_chart.set_data(list(stats.top_genres))
        genre_layout.addWidget(genre_chart)
        genre_layout.addStretch()
        charts.addWidget(genre_card, 1)

        mood_card, mood_layout = make_card()
        mood_layout.addWidget(make_label(t("mood_spectrum"), "cardTitle"))
        mood_chart = MoodRadarChart()
        mood_chart.set_data(list(stats.mood_spectrum))
        mood_layout.addWidget(mood_chart, 1)
        charts.addWidget(mood_card, 1)

        self._layout.addLayout(charts, 1)

    def _create_summary(self, stats: DashboardStats, t) -> QGridLayout:
        grid = QGridLayout()
        grid.setSpacing(20)
        figures = [
            (t("stat_scans"), str(stats.total_scans), "#ffffff"),
            (t("stat_latest"), stats.latest_vibe, NEON_BLUE),
            (t("stat_freq_mood"), stats.top_mood, NEON_PURPLE),
        ]
        for column, (label, value, color) in enumerate(figures):
            card, layout = make_card()
            layout.addWidget(make_label(label, "mutedLabel"))
            figure = make_label(value, wrap=True)
            figure.setStyleSheet(f"color: {color}; font-size: 26px; font-weight: bold;")
            layout.addWidget(figure)
            grid.addWidget(card, 0, column)
        return grid
