"""
Analyzer view: microphone capture, live visualizer and the current analysis.
"""

import logging

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from vibesync.dashboard.common.links import youtube_search_url
from vibesync.dashboard.common.models import AppStateSnapshot, AudioAnalysis, Recommendation
from vibesync.dashboard.common.translations import translate
from vibesync.dashboard.views.utils import clear_layout, make_card, make_label
from vibesync.dashboard.visualizer_widget import VisualizerWidget

logger = logging.getLogger(__name__)

FINGERPRINT_COLUMNS = 3


def format_score(score: float) -> str:
    return f"{score:g}"


class AnalyzerView(QWidget):
    """
    Capture card with the visualizer and record button, the latest
    analysis, and its list of vibe matches.
    """

    record_clicked = pyqtSignal()
    add_note_requested = pyqtSignal(object, object)  # AudioAnalysis, Recommendation
    listen_requested = pyqtSignal(str)  # url

    def __init__(
        self,
        fft_size: int = 256,
        canvas_width: int = 600,
        canvas_height: int = 200,
        frame_interval_ms: int = 16,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self._visualizer = VisualizerWidget(
            fft_size=fft_size,
            canvas_width=canvas_width,
            canvas_height=canvas_height,
            frame_interval_ms=frame_interval_ms,
        )
        self._rendered_key: tuple | None = None
        self._setup_ui()

    @property
    def visualizer(self) -> VisualizerWidget:
        return self._visualizer

    def _setup_ui(self) -> None:
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(24)

        # Left column: capture + result
        left = QVBoxLayout()
        left.setSpacing(20)

        capture_card, capture_layout = make_card()
        header = QHBoxLayout()
        self._input_label = make_label("", "cardTitle")
        header.addWidget(self._input_label)
        header.addStretch()
        self._status_label = make_label("", "statusReady")
        header.addWidget(self._status_label)
        capture_layout.addLayout(header)

        capture_layout.addWidget(self._visualizer)

        self._record_btn = QPushButton()
        self._record_btn.setObjectName("primaryButton")
        self._record_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        self._record_btn.clicked.connect(self.record_clicked.emit)
        capture_layout.addWidget(self._record_btn)

        left.addWidget(capture_card)

        self._result_card, self._result_layout = make_card()
        self._result_card.hide()
        left.addWidget(self._result_card)
        left.addStretch()

        layout.addLayout(left, 1)

        # Right column: matches
        right = QVBoxLayout()
        right.setSpacing(12)
        self._matches_title = make_label("", "cardTitle")
        right.addWidget(self._matches_title)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        matches_container = QWidget()
        self._matches_layout = QVBoxLayout(matches_container)
        self._matches_layout.setContentsMargins(0, 0, 0, 0)
        self._matches_layout.setSpacing(12)
        scroll.setWidget(matches_container)
        right.addWidget(scroll, 1)

        layout.addLayout(right, 1)

    def render(self, state: AppStateSnapshot) -> None:
        self._visualizer.set_input(state.audio_stream, state.is_recording)

        key = (
            state.language,
            state.is_recording,
            state.is_analyzing,
            state.current_analysis.id if state.current_analysis else None,
        )
        if key == self._rendered_key:
            return
        self._rendered_key = key

        def t(k: str) -> str:
            return translate(state.language, k)

        self._input_label.setText(t("input_source"))
        self._matches_title.setText(t("label_matches"))

        if state.is_recording:
            self._status_label.setText(t("status_recording"))
            self._set_object_name(self._status_label, "statusRecording")
        else:
            self._status_label.setText(t("status_ready"))
            self._set_object_name(self._status_label, "statusReady")

        if state.is_analyzing:
            self._record_btn.setText(t("btn_analyze"))
            self._record_btn.setEnabled(False)
            self._set_object_name(self._record_btn, "primaryButton")
        elif state.is_recording:
            self._record_btn.setText(t("btn_stop"))
            self._record_btn.setEnabled(True)
            self._set_object_name(self._record_btn, "stopButton")
        else:
            self._record_btn.setText(t("btn_start"))
            self._record_btn.setEnabled(True)
            self._set_object_name(self._record_btn, "primaryButton")

        self._render_result(state.current_analysis, t)
        self._render_matches(state.current_analysis, t)

    @staticmethod
    def _set_object_name(widget: QWidget, name: str) -> None:
        if widget.objectName() == name:
            return
        widget.setObjectName(name)
        widget.style().unpolish(widget)
        widget.style().polish(widget)

    def _render_result(self, analysis: AudioAnalysis | None, t) -> None:
        clear_layout(self._result_layout)
        if analysis is None:
            self._result_card.hide()
            return

        top = QHBoxLayout()
        title_col = QVBoxLayout()
        title_col.addWidget(make_label(analysis.mood, "moodLabel", wrap=True))
        title_col.addWidget(make_label(analysis.detected_genre, "genreLabel", wrap=True))
        top.addLayout(title_col, 1)

        tempo_col = QVBoxLayout()
        tempo = make_label(analysis.tempo, "tempoLabel")
        tempo.setAlignment(Qt.AlignmentFlag.AlignRight)
        tempo_col.addWidget(tempo)
        bpm = make_label(t("label_bpm"), "mutedLabel")
        bpm.setAlignment(Qt.AlignmentFlag.AlignRight)
        tempo_col.addWidget(bpm)
        top.addLayout(tempo_col)
        self._result_layout.addLayout(top)

        self._result_layout.addWidget(make_label(t("label_fingerprint"), "mutedLabel"))
        chips = QGridLayout()
        chips.setSpacing(6)
        for i, element in enumerate(analysis.key_elements):
            chips.addWidget(
                make_label(element, "chip"),
                i // FINGERPRINT_COLUMNS,
                i % FINGERPRINT_COLUMNS,
            )
        self._result_layout.addLayout(chips)

        self._result_layout.addWidget(make_label(t("label_vibe_analysis"), "mutedLabel"))
        self._result_layout.addWidget(
            make_label(analysis.vibe_description, wrap=True)
        )
        self._result_card.show()

    def _render_matches(self, analysis: AudioAnalysis | None, t) -> None:
        clear_layout(self._matches_layout)

        if analysis is None:
            empty_card, empty_layout = make_card()
            empty = make_label(t("empty_analysis"), "mutedLabel", wrap=True)
            empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
            empty_layout.addWidget(empty)
            self._matches_layout.addWidget(empty_card)
            self._matches_layout.addStretch()
            return

        for recommendation in analysis.recommendations:
            self._matches_layout.addWidget(
                self._create_match_card(analysis, recommendation, t)
            )
        self._matches_layout.addStretch()

    def _create_match_card(
        self, analysis: AudioAnalysis, recommendation: Recommendation, t
    ) -> QWidget:
        card, layout = make_card()

        top = QHBoxLayout()
        names = QVBoxLayout()
        names.addWidget(make_label(recommendation.title, "cardTitle", wrap=True))
        names.addWidget(make_label(recommendation.artist, "mutedLabel"))
        top.addLayout(names, 1)
        badge = make_label(
            f"{format_score(recommendation.similarity_score)}% {t('match_score')}",
            "scoreBadge",
        )
        top.addWidget(badge, alignment=Qt.AlignmentFlag.AlignTop)
        layout.addLayout(top)

        layout.addWidget(make_label(f'"{recommendation.reason}"', wrap=True))

        actions = QHBoxLayout()
        note_btn = QPushButton(f"+ {t('btn_add_note')}")
        note_btn.setObjectName("linkButton")
        note_btn.clicked.connect(
            lambda: self.add_note_requested.emit(analysis, recommendation)
        )
        actions.addWidget(note_btn)
        actions.addStretch()

        url = youtube_search_url(recommendation.artist, recommendation.title)
        listen_btn = QPushButton(t("btn_listen_yt"))
        listen_btn.setObjectName("linkButton")
        listen_btn.clicked.connect(lambda: self.listen_requested.emit(url))
        actions.addWidget(listen_btn)
        layout.addLayout(actions)

        return card

    def teardown(self) -> None:
        self._visualizer.teardown()
