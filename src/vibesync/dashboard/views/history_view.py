"""
History view: every stored analysis, newest first.
"""

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QFrame, QHBoxLayout, QScrollArea, QVBoxLayout, QWidget

from vibesync.dashboard.common.models import AppStateSnapshot, AudioAnalysis
from vibesync.dashboard.common.translations import translate
from vibesync.dashboard.views.utils import clear_layout, format_timestamp, make_label


class HistoryItem(QFrame):
    """One clickable history row."""

    clicked = pyqtSignal(object)  # AudioAnalysis

    def __init__(self, analysis: AudioAnalysis, parent: QWidget | None = None):
        super().__init__(parent)
        self.analysis = analysis
        self.setObjectName("card")
        self.setCursor(Qt.CursorShape.PointingHandCursor)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(20, 14, 20, 14)

        text = QVBoxLayout()
        text.addWidget(make_label(analysis.detected_genre, "cardTitle"))
        text.addWidget(
            make_label(
                f"{format_timestamp(analysis.timestamp)} • {analysis.mood}",
                "mutedLabel",
            )
        )
        layout.addLayout(text, 1)

        tempo = QVBoxLayout()
        tempo_value = make_label(analysis.tempo, "tempoLabel")
        tempo_value.setAlignment(Qt.AlignmentFlag.AlignRight)
        tempo.addWidget(tempo_value)
        bpm = make_label("BPM", "mutedLabel")
        bpm.setAlignment(Qt.AlignmentFlag.AlignRight)
        tempo.addWidget(bpm)
        layout.addLayout(tempo)

    def mouseReleaseEvent(self, event) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self.clicked.emit(self.analysis)
        super().mouseReleaseEvent(event)


class HistoryView(QWidget):
    """List of past analyses; clicking one opens it in the Analyzer."""

    analysis_selected = pyqtSignal(object)  # AudioAnalysis

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self._rendered_key: tuple | None = None

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        container = QWidget()
        self._list_layout = QVBoxLayout(container)
        self._list_layout.setContentsMargins(0, 0, 0, 0)
        self._list_layout.setSpacing(12)
        scroll.setWidget(container)
        outer.addWidget(scroll)

    def render(self, state: AppStateSnapshot) -> None:
        key = (state.language, tuple(a.id for a in state.history))
        if key == self._rendered_key:
            return
        self._rendered_key = key

        clear_layout(self._list_layout)

        if not state.history:
            empty = make_label(translate(state.language, "no_history"), "mutedLabel")
            empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
            self._list_layout.addWidget(empty)
        else:
            for analysis in state.history:
                item = HistoryItem(analysis)
                item.clicked.connect(self.analysis_selected.emit)
                self._list_layout.addWidget(item)
        self._list_layout.addStretch()
