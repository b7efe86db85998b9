"""
Notes view: composer plus the list of saved notes.
"""

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QPlainTextEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from vibesync.dashboard.common.controller import related_analysis_label
from vibesync.dashboard.common.models import AppStateSnapshot, Note
from vibesync.dashboard.common.translations import translate
from vibesync.dashboard.views.utils import clear_layout, format_date, make_card, make_label

NOTE_COLUMNS = 2


class NotesView(QWidget):
    note_submitted = pyqtSignal(str)
    delete_requested = pyqtSignal(str)  # note id

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self._rendered_key: tuple | None = None
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(20)

        composer, composer_layout = make_card()
        self._composer_title = make_label("", "cardTitle")
        composer_layout.addWidget(self._composer_title)

        self._editor = QPlainTextEdit()
        self._editor.setFixedHeight(110)
        composer_layout.addWidget(self._editor)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self._save_btn = QPushButton()
        self._save_btn.setObjectName("primaryButton")
        self._save_btn.clicked.connect(self._on_save)
        buttons.addWidget(self._save_btn)
        composer_layout.addLayout(buttons)
        layout.addWidget(composer)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        container = QWidget()
        self._notes_layout = QGridLayout(container)
        self._notes_layout.setContentsMargins(0, 0, 0, 0)
        self._notes_layout.setSpacing(16)
        self._notes_layout.setAlignment(Qt.AlignmentFlag.AlignTop)
        scroll.setWidget(container)
        layout.addWidget(scroll, 1)

    def _on_save(self) -> None:
        content = self._editor.toPlainText()
        if not content.strip():
            return
        self.note_submitted.emit(content)
        self._editor.clear()

    def render(self, state: AppStateSnapshot) -> None:
        key = (
            state.language,
            tuple(n.id for n in state.notes),
            tuple(a.id for a in state.history),
        )
        if key == self._rendered_key:
            return
        self._rendered_key = key

        def t(k: str) -> str:
            return translate(state.language, k)

        self._composer_title.setText(t("note_new"))
        self._editor.setPlaceholderText(t("note_placeholder"))
        self._save_btn.setText(t("note_save"))

        clear_layout(self._notes_layout)
        if not state.notes:
            empty = make_label(t("note_empty"), "mutedLabel")
            empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
            self._notes_layout.addWidget(empty, 0, 0, 1, NOTE_COLUMNS)
            return

        for i, note in enumerate(state.notes):
            self._notes_layout.addWidget(
                self._create_note_card(note, related_analysis_label(state.history, note)),
                i // NOTE_COLUMNS,
                i % NOTE_COLUMNS,
            )

    def _create_note_card(self, note: Note, related: str | None) -> QWidget:
        card, layout = make_card()

        top = QHBoxLayout()
        top.addWidget(make_label(format_date(note.timestamp), "mutedLabel"))
        top.addStretch()
        delete_btn = QPushButton("✕")
        delete_btn.setObjectName("deleteButton")
        delete_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        delete_btn.clicked.connect(lambda: self.delete_requested.emit(note.id))
        top.addWidget(delete_btn)
        layout.addLayout(top)

        layout.addWidget(make_label(note.content, wrap=True))

        if related:
            layout.addWidget(make_label(f"♪ {related}", "genreLabel"))

        return card
