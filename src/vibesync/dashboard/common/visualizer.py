"""
Live frequency-bar visualizer.

Toolkit-independent core: a frequency analyser over the live microphone
buffer, the bar layout, and a Visualizer that drives a self-rescheduling
frame loop from two inputs (stream presence and the recording flag).

Drawing and frame timing go through the Canvas and FrameScheduler
protocols; the PyQt6 implementations live in visualizer_widget.py.
"""

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_FFT_SIZE = 256
MIN_FFT_SIZE = 32
MAX_FFT_SIZE = 32768

# Same defaults as a Web Audio AnalyserNode
SMOOTHING_TIME_CONSTANT = 0.8
MIN_DECIBELS = -100.0
MAX_DECIBELS = -30.0

BACKGROUND_COLOR = "#0a0a12"
GRADIENT_BOTTOM_COLOR = "#b026ff"
GRADIENT_TOP_COLOR = "#00ff9d"

# Bars are deliberately wider than their slot, so neighbours overlap
BAR_WIDTH_MULTIPLIER = 2.5
BAR_GUTTER = 2
BAR_CORNER_RADIUS = 5
BAR_HEIGHT_SCALE = 0.5


class SampleSource(Protocol):
    """Anything that can hand out its newest audio samples."""

    def latest_samples(self, count: int) -> np.ndarray: ...


@dataclass(frozen=True)
class Gradient:
    """Vertical linear gradient from ``y_start`` (bottom) to ``y_end`` (top)."""

    start_color: str
    end_color: str
    y_start: float
    y_end: float


class Canvas(Protocol):
    """2D drawing surface for the bars."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def clear(self) -> None: ...

    def fill_background(self, color: str) -> None: ...

    def fill_bar(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        radius: float,
        gradient: Gradient,
    ) -> None: ...


class FrameScheduler(Protocol):
    """Display-sync callback source (requestAnimationFrame style)."""

    def request_frame(self, callback: Callable[[], None]) -> Any: ...

    def cancel_frame(self, handle: Any) -> None: ...


def bar_width(canvas_width: float, bin_count: int) -> float:
    """Width of one bar for a canvas of ``canvas_width`` and ``bin_count`` bins."""
    return (canvas_width / bin_count) * BAR_WIDTH_MULTIPLIER


def bar_height(magnitude: int) -> float:
    return magnitude * BAR_HEIGHT_SCALE


def _blackman_window(size: int) -> np.ndarray:
    """Periodic Blackman window (alpha = 0.16), as used by AnalyserNode."""
    n = np.arange(size)
    a0, a1, a2 = 0.42, 0.5, 0.08
    return (
        a0
        - a1 * np.cos(2 * np.pi * n / size)
        + a2 * np.cos(4 * np.pi * n / size)
    ).astype(np.float64)


class FrequencyAnalyser:
    """
    Byte-valued magnitude spectrum of the newest samples of a stream.

    Mirrors AnalyserNode.getByteFrequencyData: windowed FFT, smoothing over
    time, conversion to dB, then linear mapping of [min_db, max_db] onto
    [0, 255]. The smoothed spectrum is the only state carried between calls.
    """

    def __init__(
        self,
        source: SampleSource,
        fft_size: int = DEFAULT_FFT_SIZE,
        smoothing_time_constant: float = SMOOTHING_TIME_CONSTANT,
        min_decibels: float = MIN_DECIBELS,
        max_decibels: float = MAX_DECIBELS,
    ):
        if (
            fft_size < MIN_FFT_SIZE
            or fft_size > MAX_FFT_SIZE
            or fft_size & (fft_size - 1) != 0
        ):
            raise ValueError(
                f"fft_size must be a power of two in [{MIN_FFT_SIZE}, {MAX_FFT_SIZE}], "
                f"got {fft_size}"
            )
        if not 0.0 <= smoothing_time_constant <= 1.0:
            raise ValueError("smoothing_time_constant must be in [0, 1]")
        if min_decibels >= max_decibels:
            raise ValueError("min_decibels must be below max_decibels")

        self.source = source
        self.fft_size = fft_size
        self.smoothing_time_constant = smoothing_time_constant
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels

        self._window = _blackman_window(fft_size)
        self._smoothed = np.zeros(self.frequency_bin_count, dtype=np.float64)

    @property
    def frequency_bin_count(self) -> int:
        return self.fft_size // 2

    def get_float_frequency_data(self) -> np.ndarray:
        """Smoothed magnitude spectrum in dB (``-inf`` for silent bins)."""
        samples = np.asarray(
            self.source.latest_samples(self.fft_size), dtype=np.float64
        )
        spectrum = np.fft.rfft(samples * self._window)[: self.frequency_bin_count]
        magnitude = np.abs(spectrum) / self.fft_size

        tc = self.smoothing_time_constant
        self._smoothed = tc * self._smoothed + (1.0 - tc) * magnitude

        with np.errstate(divide="ignore"):
            return 20.0 * np.log10(self._smoothed)

    def get_byte_frequency_data(self, out: np.ndarray | None = None) -> np.ndarray:
        """
        Fill ``out`` (uint8, one entry per bin) with the current spectrum.

        A fresh array is allocated when ``out`` is None. A shorter ``out``
        receives only its first ``len(out)`` bins.
        """
        db = self.get_float_frequency_data()
        scale = 255.0 / (self.max_decibels - self.min_decibels)
        scaled = np.floor(scale * (db - self.min_decibels))
        values = np.clip(scaled, 0, 255).astype(np.uint8)

        if out is None:
            return values
        count = min(len(out), len(values))
        out[:count] = values[:count]
        return out


def render_bars(canvas: Canvas, magnitudes: np.ndarray) -> None:
    """Draw one rounded, gradient-filled bar per bin, left to right."""
    width = bar_width(canvas.width, len(magnitudes))
    x = 0.0
    for magnitude in magnitudes:
        height = bar_height(int(magnitude))
        top = canvas.height - height
        gradient = Gradient(
            start_color=GRADIENT_BOTTOM_COLOR,
            end_color=GRADIENT_TOP_COLOR,
            y_start=canvas.height,
            y_end=top,
        )
        canvas.fill_bar(x, top, width, height, BAR_CORNER_RADIUS, gradient)
        x += width + BAR_GUTTER


class FrameLoop:
    """
    Self-rescheduling frame task.

    ``step`` runs once per frame and returns True to keep going. The loop
    owns the pending frame handle; leaving the ``with`` block (or calling
    ``cancel``) always cancels it.
    """

    def __init__(self, scheduler: FrameScheduler, step: Callable[[], bool]):
        self._scheduler = scheduler
        self._step = step
        self._handle: Any = None
        self._running = False
        self.frames = 0

    def __enter__(self) -> "FrameLoop":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._handle = self._scheduler.request_frame(self._tick)

    def _tick(self) -> None:
        self._handle = None
        if not self._running:
            return

        self.frames += 1
        if not self._step():
            self._running = False
            return

        # step() may have cancelled us
        if self._running:
            self._handle = self._scheduler.request_frame(self._tick)

    def cancel(self) -> None:
        self._running = False
        if self._handle is not None:
            self._scheduler.cancel_frame(self._handle)
            self._handle = None


class VisualizerState(Enum):
    IDLE = "idle"  # no stream
    BOUND = "bound"  # stream attached, analyser created
    ANIMATING = "animating"  # frames scheduling


class Visualizer:
    """
    Bar-graph animation of the live microphone spectrum.

    Driven only by ``update(stream, is_recording)`` and ``teardown()``:

    - a new stream gets exactly one analyser, reused for every frame
    - recording with a bound stream runs the frame loop
    - recording off, a stream change or teardown cancels the pending
      frame and clears the canvas
    - no canvas available means the component stays inert
    """

    def __init__(
        self,
        canvas_provider: Callable[[], Canvas | None],
        scheduler: FrameScheduler,
        fft_size: int = DEFAULT_FFT_SIZE,
        analyser_factory: Callable[..., FrequencyAnalyser] = FrequencyAnalyser,
    ):
        self._canvas_provider = canvas_provider
        self._scheduler = scheduler
        self._fft_size = fft_size
        self._analyser_factory = analyser_factory

        self._stream: SampleSource | None = None
        self._canvas: Canvas | None = None
        self._analyser: FrequencyAnalyser | None = None
        self._bins: np.ndarray | None = None
        self._is_recording = False
        self._loop_scope: ExitStack | None = None
        self._frame_loop: FrameLoop | None = None

    @property
    def state(self) -> VisualizerState:
        if self._analyser is None:
            return VisualizerState.IDLE
        if self._frame_loop is not None and self._frame_loop.running:
            return VisualizerState.ANIMATING
        return VisualizerState.BOUND

    @property
    def analyser(self) -> FrequencyAnalyser | None:
        return self._analyser

    def update(self, stream: SampleSource | None, is_recording: bool) -> None:
        """React to a change of the (stream, recording flag) pair."""
        self._is_recording = is_recording

        if stream is not self._stream:
            self._unbind()
            self._stream = stream
            if stream is not None:
                self._bind(stream)

        if self._analyser is None:
            return

        animating = self._frame_loop is not None and self._frame_loop.running
        if is_recording and not animating:
            self._start_loop()
        elif not is_recording:
            self._stop_loop()

    def teardown(self) -> None:
        """Cancel any pending frame, clear the canvas and drop the analyser."""
        self._is_recording = False
        self._unbind()
        self._stream = None

    def _bind(self, stream: SampleSource) -> None:
        canvas = self._canvas_provider()
        if canvas is None:
            logger.debug("No drawing surface available; visualizer inactive")
            return

        self._canvas = canvas
        self._analyser = self._analyser_factory(stream, fft_size=self._fft_size)
        self._bins = np.zeros(self._analyser.frequency_bin_count, dtype=np.uint8)
        logger.debug(
            f"Visualizer bound ({self._analyser.frequency_bin_count} bins)"
        )

    def _unbind(self) -> None:
        self._stop_loop()
        self._analyser = None
        self._bins = None
        self._canvas = None

    def _start_loop(self) -> None:
        self._stop_loop()
        scope = ExitStack()
        self._frame_loop = scope.enter_context(
            FrameLoop(self._scheduler, self._draw_frame)
        )
        self._loop_scope = scope

    def _stop_loop(self) -> None:
        if self._loop_scope is not None:
            self._loop_scope.close()
            self._loop_scope = None
            self._frame_loop = None
        if self._canvas is not None:
            self._canvas.clear()

    def _draw_frame(self) -> bool:
        """One animation frame. Returns False to end the loop."""
        canvas = self._canvas
        if not self._is_recording or canvas is None or self._analyser is None:
            if canvas is not None:
                canvas.clear()
            return False

        data = self._analyser.get_byte_frequency_data(self._bins)
        canvas.fill_background(BACKGROUND_COLOR)
        render_bars(canvas, data)
        return True
