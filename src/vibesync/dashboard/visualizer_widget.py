"""
PyQt6 adapter for the live visualizer.

QImageCanvas paints bars onto an off-screen QImage, QtFrameScheduler turns
frame requests into single-shot QTimers, and VisualizerWidget blits the
image in paintEvent.
"""

from typing import Any, Callable

from PyQt6.QtCore import QObject, QRectF, Qt, QTimer
from PyQt6.QtGui import QBrush, QColor, QImage, QLinearGradient, QPainter
from PyQt6.QtWidgets import QSizePolicy, QWidget

from vibesync.dashboard.common.visualizer import (
    DEFAULT_FFT_SIZE,
    Gradient,
    Visualizer,
    VisualizerState,
)


class QImageCanvas:
    """Canvas backed by a QImage."""

    def __init__(self, width: int, height: int):
        self.image = QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)
        self.image.fill(Qt.GlobalColor.transparent)

    @property
    def width(self) -> int:
        return self.image.width()

    @property
    def height(self) -> int:
        return self.image.height()

    def clear(self) -> None:
        self.image.fill(Qt.GlobalColor.transparent)

    def fill_background(self, color: str) -> None:
        self.image.fill(QColor(color))

    def fill_bar(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        radius: float,
        gradient: Gradient,
    ) -> None:
        if width <= 0 or height <= 0:
            return

        fill = QLinearGradient(0, gradient.y_start, 0, gradient.y_end)
        fill.setColorAt(0.0, QColor(gradient.start_color))
        fill.setColorAt(1.0, QColor(gradient.end_color))

        r = min(radius, width / 2, height / 2)

        painter = QPainter(self.image)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(fill))
            painter.drawRoundedRect(QRectF(x, y, width, height), r, r)
        finally:
            painter.end()


class QtFrameScheduler:
    """Frame scheduler built on single-shot QTimers."""

    def __init__(
        self,
        interval_ms: int = 16,
        parent: QObject | None = None,
        after_frame: Callable[[], None] | None = None,
    ):
        self.interval_ms = interval_ms
        self._parent = parent
        self._after_frame = after_frame
        self._pending: set[QTimer] = set()

    def request_frame(self, callback: Callable[[], None]) -> QTimer:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.timeout.connect(lambda: self._fire(timer, callback))
        self._pending.add(timer)
        timer.start(self.interval_ms)
        return timer

    def _fire(self, timer: QTimer, callback: Callable[[], None]) -> None:
        if timer not in self._pending:
            return
        self._pending.discard(timer)
        timer.deleteLater()
        callback()
        if self._after_frame:
            self._after_frame()

    def cancel_frame(self, handle: Any) -> None:
        if handle in self._pending:
            self._pending.discard(handle)
            handle.stop()
            handle.deleteLater()


class VisualizerWidget(QWidget):
    """Widget showing the live frequency bars while recording."""

    def __init__(
        self,
        fft_size: int = DEFAULT_FFT_SIZE,
        canvas_width: int = 600,
        canvas_height: int = 200,
        frame_interval_ms: int = 16,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self.setObjectName("visualizer")
        self.setMinimumHeight(128)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)

        self._canvas = QImageCanvas(canvas_width, canvas_height)
        self._scheduler = QtFrameScheduler(
            frame_interval_ms, parent=self, after_frame=self.update
        )
        self._visualizer = Visualizer(
            self._provide_canvas, self._scheduler, fft_size=fft_size
        )

    def _provide_canvas(self) -> QImageCanvas | None:
        return None if self._canvas.image.isNull() else self._canvas

    @property
    def state(self) -> VisualizerState:
        return self._visualizer.state

    def set_input(self, stream: Any, is_recording: bool) -> None:
        """Feed the current stream handle and recording flag."""
        self._visualizer.update(stream, is_recording)
        self.update()

    def teardown(self) -> None:
        self._visualizer.teardown()
        self.update()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
            painter.fillRect(self.rect(), QColor(0, 0, 0, 51))
            painter.drawImage(QRectF(self.rect()), self._canvas.image)
        finally:
            painter.end()

    def closeEvent(self, event) -> None:
        self.teardown()
        super().closeEvent(event)
