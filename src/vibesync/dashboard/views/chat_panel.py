"""
Floating VibeBot chat panel.
"""

from PyQt6.QtCore import QTimer, Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from vibesync.dashboard.common.models import AppStateSnapshot, ChatMessage
from vibesync.dashboard.common.translations import translate
from vibesync.dashboard.views.utils import clear_layout, make_label

PANEL_WIDTH = 380
PANEL_HEIGHT = 500
BUBBLE_MAX_WIDTH = 280


class ChatPanel(QFrame):
    message_submitted = pyqtSignal(str)
    close_requested = pyqtSignal()

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setObjectName("chatPanel")
        self.setFixedSize(PANEL_WIDTH, PANEL_HEIGHT)
        self._rendered_key: tuple | None = None
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        header = QFrame()
        header.setObjectName("chatHeader")
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(16, 12, 12, 12)
        self._title = make_label("", "cardTitle")
        header_layout.addWidget(self._title)
        header_layout.addStretch()
        close_btn = QPushButton("✕")
        close_btn.setObjectName("linkButton")
        close_btn.clicked.connect(self.close_requested.emit)
        header_layout.addWidget(close_btn)
        layout.addWidget(header)

        self._scroll = QScrollArea()
        self._scroll.setWidgetResizable(True)
        container = QWidget()
        self._messages_layout = QVBoxLayout(container)
        self._messages_layout.setContentsMargins(12, 12, 12, 12)
        self._messages_layout.setSpacing(10)
        self._scroll.setWidget(container)
        layout.addWidget(self._scroll, 1)

        footer = QHBoxLayout()
        footer.setContentsMargins(12, 12, 12, 12)
        self._input = QLineEdit()
        self._input.returnPressed.connect(self._on_send)
        footer.addWidget(self._input, 1)
        send_btn = QPushButton("➤")
        send_btn.setObjectName("primaryButton")
        send_btn.clicked.connect(self._on_send)
        footer.addWidget(send_btn)
        layout.addLayout(footer)

    def _on_send(self) -> None:
        text = self._input.text()
        if not text.strip():
            return
        self._input.clear()
        self.message_submitted.emit(text)

    def render(self, state: AppStateSnapshot) -> None:
        key = (state.language, state.chat_messages)
        if key == self._rendered_key:
            return
        self._rendered_key = key

        self._title.setText(translate(state.language, "chat_title"))
        self._input.setPlaceholderText(translate(state.language, "chat_placeholder"))

        clear_layout(self._messages_layout)
        for message in state.chat_messages:
            self._messages_layout.addLayout(self._create_bubble(message))
        self._messages_layout.addStretch()

        # Scroll once the new bubbles have been laid out
        QTimer.singleShot(0, self._scroll_to_bottom)

    def _create_bubble(self, message: ChatMessage) -> QHBoxLayout:
        row = QHBoxLayout()
        is_user = message.role == "user"
        bubble = make_label(
            message.content,
            "chatUserBubble" if is_user else "chatAssistantBubble",
            wrap=True,
        )
        bubble.setMaximumWidth(BUBBLE_MAX_WIDTH)
        bubble.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        if is_user:
            row.addStretch()
            row.addWidget(bubble)
        else:
            row.addWidget(bubble)
            row.addStretch()
        return row

    def _scroll_to_bottom(self) -> None:
        bar = self._scroll.verticalScrollBar()
        bar.setValue(bar.maximum())
