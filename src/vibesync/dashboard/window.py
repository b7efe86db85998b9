"""
Main window for the VibeSync dashboard.

The window owns a background asyncio loop thread on which every
AppController operation runs, so all state changes happen on one thread.
Controller snapshots come back to the Qt thread through a queued signal and
are rendered there.
"""

import asyncio
import concurrent.futures
import logging
import threading
import webbrowser
from collections.abc import Callable, Coroutine
from typing import Any

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from vibesync.dashboard.common.api_client import APIClient
from vibesync.dashboard.common.audio_recorder import AudioRecorder
from vibesync.dashboard.common.config import ClientConfig
from vibesync.dashboard.common.controller import AppController
from vibesync.dashboard.common.models import AppStateSnapshot, AppView
from vibesync.dashboard.common.translations import LANGUAGE_NAMES, translate
from vibesync.dashboard.styles import get_dashboard_stylesheet
from vibesync.dashboard.views.analyzer_view import AnalyzerView
from vibesync.dashboard.views.chat_panel import ChatPanel
from vibesync.dashboard.views.dashboard_view import DashboardView
from vibesync.dashboard.views.history_view import HistoryView
from vibesync.dashboard.views.notes_view import NotesView
from vibesync.dashboard.views.utils import make_label

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT = 3.0

_NAV_KEYS = {
    AppView.ANALYZER: "nav_listen",
    AppView.DASHBOARD: "nav_stats",
    AppView.HISTORY: "nav_history",
    AppView.NOTES: "nav_notes",
}


class MainWindow(QMainWindow):
    """Sidebar navigation, per-view header, stacked views and chat panel."""

    _SIDEBAR_WIDTH = 240
    _CHAT_MARGIN = 24

    # Emitted from the loop thread; delivered queued on the Qt thread
    state_changed = pyqtSignal(object)  # AppStateSnapshot
    alert_requested = pyqtSignal(str)

    def __init__(self, config: ClientConfig, parent: QWidget | None = None):
        super().__init__(parent)
        self.config = config

        self.event_loop: asyncio.AbstractEventLoop | None = None
        self._loop_thread: threading.Thread | None = None
        self._loop_ready = threading.Event()
        self._closing = False

        api_client = APIClient(
            host=config.server_host,
            port=config.server_port,
            use_https=config.use_https,
            timeout=config.get("server", "timeout", default=30),
            analysis_timeout=config.get("server", "analysis_timeout", default=180),
        )
        self._controller = AppController(
            api_client,
            recorder_factory=self._create_recorder,
            alert=self.alert_requested.emit,
            language=config.language,
        )
        self._state = self._controller.state

        self.state_changed.connect(self._render)
        self.alert_requested.connect(self._show_alert)
        self._controller.add_listener(self.state_changed.emit)

        self._setup_ui()
        self.setStyleSheet(get_dashboard_stylesheet())
        self._render(self._state)

        self._start_loop()
        self._submit(self._controller.load())

    @property
    def controller(self) -> AppController:
        return self._controller

    def _create_recorder(self) -> AudioRecorder:
        return AudioRecorder(
            sample_rate=self.config.get("recording", "sample_rate", default=44100),
            chunk_size=self.config.get("recording", "chunk_size", default=1024),
            device_index=self.config.get("recording", "device_index"),
        )

    # =========================================================================
    # Event loop thread
    # =========================================================================

    def _start_loop(self) -> None:
        self._loop_thread = threading.Thread(target=self._run_async_loop, daemon=True)
        self._loop_thread.start()
        if not self._loop_ready.wait(timeout=5.0):
            raise RuntimeError("Event loop failed to start")

    def _run_async_loop(self) -> None:
        """Run the asyncio event loop in a background thread."""
        self.event_loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.event_loop)
        self._loop_ready.set()
        self.event_loop.run_forever()
        self.event_loop.close()

    def _submit(self, coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future:
        """Schedule a coroutine on the loop thread."""
        if self.event_loop is None:
            raise RuntimeError("Event loop not running")
        future = asyncio.run_coroutine_threadsafe(coro, self.event_loop)
        future.add_done_callback(self._log_failure)
        return future

    def _call(self, fn: Callable[..., Any], *args: Any) -> None:
        """Run a synchronous controller operation on the loop thread."""
        if self.event_loop is None:
            raise RuntimeError("Event loop not running")
        self.event_loop.call_soon_threadsafe(fn, *args)

    @staticmethod
    def _log_failure(future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Background operation failed", exc_info=error)

    # =========================================================================
    # UI
    # =========================================================================

    def _setup_ui(self) -> None:
        self.setWindowTitle("VibeSync")
        self.setMinimumSize(1100, 720)

        central = QWidget()
        central.setObjectName("central")
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        main_layout.addWidget(self._create_sidebar())

        content = QWidget()
        content_layout = QVBoxLayout(content)
        content_layout.setContentsMargins(40, 32, 40, 32)
        content_layout.setSpacing(24)
        content_layout.addLayout(self._create_header())

        visualizer = self.config.get("visualizer", default={}) or {}
        self._analyzer_view = AnalyzerView(
            fft_size=visualizer.get("fft_size", 256),
            canvas_width=visualizer.get("width", 600),
            canvas_height=visualizer.get("height", 200),
            frame_interval_ms=visualizer.get("frame_interval_ms", 16),
        )
        self._dashboard_view = DashboardView()
        self._history_view = HistoryView()
        self._notes_view = NotesView()

        self._views: dict[AppView, QWidget] = {
            AppView.ANALYZER: self._analyzer_view,
            AppView.DASHBOARD: self._dashboard_view,
            AppView.HISTORY: self._history_view,
            AppView.NOTES: self._notes_view,
        }
        self._stack = QStackedWidget()
        for view in self._views.values():
            self._stack.addWidget(view)
        content_layout.addWidget(self._stack, 1)
        main_layout.addWidget(content, 1)

        self._chat_panel = ChatPanel(central)
        self._chat_panel.hide()

        self._analyzer_view.record_clicked.connect(self._on_record_clicked)
        self._analyzer_view.add_note_requested.connect(
            lambda analysis, rec: self._submit(
                self._controller.add_recommendation_note(analysis, rec)
            )
        )
        self._analyzer_view.listen_requested.connect(self._open_link)
        self._history_view.analysis_selected.connect(
            lambda analysis: self._call(self._controller.select_analysis, analysis)
        )
        self._notes_view.note_submitted.connect(
            lambda content: self._submit(self._controller.add_note(content))
        )
        self._notes_view.delete_requested.connect(
            lambda note_id: self._submit(self._controller.delete_note(note_id))
        )
        self._chat_panel.message_submitted.connect(
            lambda text: self._submit(self._controller.send_chat_message(text))
        )
        self._chat_panel.close_requested.connect(
            lambda: self._call(self._controller.toggle_chat)
        )

    def _create_sidebar(self) -> QWidget:
        sidebar = QFrame()
        sidebar.setObjectName("sidebar")
        sidebar.setFixedWidth(self._SIDEBAR_WIDTH)
        layout = QVBoxLayout(sidebar)
        layout.setContentsMargins(16, 24, 16, 24)
        layout.setSpacing(6)

        layout.addWidget(make_label("VibeSync", "sidebarTitle"))
        layout.addSpacing(24)

        self._nav_buttons: dict[AppView, QPushButton] = {}
        for view in AppView:
            btn = QPushButton()
            btn.setObjectName("sidebarButton")
            btn.setCheckable(True)
            btn.setCursor(Qt.CursorShape.PointingHandCursor)
            btn.clicked.connect(
                lambda _checked, v=view: self._call(self._controller.set_view, v)
            )
            self._nav_buttons[view] = btn
            layout.addWidget(btn)

        layout.addStretch()

        self._language_btn = QPushButton()
        self._language_btn.setObjectName("languageButton")
        self._language_btn.clicked.connect(
            lambda: self._call(self._controller.toggle_language)
        )
        layout.addWidget(self._language_btn)

        self._assistant_btn = QPushButton()
        self._assistant_btn.setObjectName("assistantButton")
        self._assistant_btn.clicked.connect(
            lambda: self._call(self._controller.toggle_chat)
        )
        layout.addWidget(self._assistant_btn)

        return sidebar

    def _create_header(self) -> QHBoxLayout:
        header = QHBoxLayout()
        titles = QVBoxLayout()
        self._title_label = make_label("", "viewTitle")
        titles.addWidget(self._title_label)
        self._description_label = make_label("", "viewDescription")
        titles.addWidget(self._description_label)
        header.addLayout(titles, 1)

        self._system_label = make_label("", "systemStatus")
        header.addWidget(self._system_label, alignment=Qt.AlignmentFlag.AlignTop)
        return header

    # =========================================================================
    # Rendering
    # =========================================================================

    def _render(self, state: AppStateSnapshot) -> None:
        """Render a controller snapshot. Runs on the Qt thread."""
        if self._closing:
            return
        previous = self._state
        self._state = state

        def t(key: str) -> str:
            return translate(state.language, key)

        for view, btn in self._nav_buttons.items():
            btn.setText(t(_NAV_KEYS[view]))
            btn.setChecked(view == state.active_view)

        self._language_btn.setText(f"🌐  {LANGUAGE_NAMES[state.language]}")
        self._assistant_btn.setText(f"✨  {t('ai_assistant')}")

        suffix = state.active_view.value
        self._title_label.setText(t(f"title_{suffix}"))
        self._description_label.setText(t(f"desc_{suffix}"))
        self._system_label.setText(f"●  {t('system_ok')}")

        self._stack.setCurrentWidget(self._views[state.active_view])

        self._analyzer_view.render(state)
        self._dashboard_view.render(state)
        self._history_view.render(state)
        self._notes_view.render(state)
        self._chat_panel.render(state)

        self._chat_panel.setVisible(state.chat_open)
        if state.chat_open:
            self._position_chat_panel()
            self._chat_panel.raise_()

        if state.language != previous.language:
            self._remember_language(state.language)

    def _position_chat_panel(self) -> None:
        parent = self._chat_panel.parentWidget()
        if parent is None:
            return
        self._chat_panel.move(
            parent.width() - self._chat_panel.width() - self._CHAT_MARGIN,
            parent.height() - self._chat_panel.height() - self._CHAT_MARGIN,
        )

    def _remember_language(self, language: str) -> None:
        self.config.set("ui", "language", value=language)
        if not self.config.save():
            logger.warning("Could not persist language preference")

    # =========================================================================
    # Actions
    # =========================================================================

    def _on_record_clicked(self) -> None:
        if self._state.is_analyzing:
            return
        if self._state.is_recording:
            self._submit(self._controller.stop_recording())
        else:
            self._submit(self._controller.start_recording())

    def _open_link(self, url: str) -> None:
        logger.debug(f"Opening {url}")
        webbrowser.open(url)

    def _show_alert(self, message: str) -> None:
        QMessageBox.warning(self, "VibeSync", message)

    # =========================================================================
    # Qt events
    # =========================================================================

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        if self._chat_panel.isVisible():
            self._position_chat_panel()

    def closeEvent(self, event) -> None:
        self._closing = True
        self._controller.remove_listener(self.state_changed.emit)
        self._analyzer_view.teardown()

        if self.event_loop is not None:
            future = asyncio.run_coroutine_threadsafe(
                self._controller.shutdown(), self.event_loop
            )
            try:
                future.result(timeout=SHUTDOWN_TIMEOUT)
            except concurrent.futures.TimeoutError:
                logger.warning("Controller shutdown timed out")
            except Exception as e:
                logger.error(f"Controller shutdown failed: {e}")
            self.event_loop.call_soon_threadsafe(self.event_loop.stop)

        if self._loop_thread is not None:
            self._loop_thread.join(timeout=SHUTDOWN_TIMEOUT)

        logger.info("Dashboard closed")
        super().closeEvent(event)
