"""Tests for the visualizer frame loop and bar layout."""

from __future__ import annotations

from typing import Callable

import numpy as np
import pytest

from vibesync.dashboard.common.visualizer import (
    BACKGROUND_COLOR,
    BAR_CORNER_RADIUS,
    FrameLoop,
    FrequencyAnalyser,
    Visualizer,
    VisualizerState,
    bar_width,
    render_bars,
)


class _Canvas:
    def __init__(self, width: int = 600, height: int = 200):
        self._width = width
        self._height = height
        self.cleared = 0
        self.backgrounds: list[str] = []
        self.bars: list[tuple] = []

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self) -> None:
        self.cleared += 1

    def fill_background(self, color: str) -> None:
        self.backgrounds.append(color)

    def fill_bar(self, x, y, width, height, radius, gradient) -> None:
        self.bars.append((x, y, width, height, radius, gradient))


class _Scheduler:
    def __init__(self) -> None:
        self.pending: dict[int, Callable[[], None]] = {}
        self.cancelled: list[int] = []
        self._next = 0

    def request_frame(self, callback: Callable[[], None]) -> int:
        self._next += 1
        self.pending[self._next] = callback
        return self._next

    def cancel_frame(self, handle: int) -> None:
        self.cancelled.append(handle)
        self.pending.pop(handle, None)

    def run_frame(self) -> None:
        handle = min(self.pending)
        self.pending.pop(handle)()


class _Stream:
    def latest_samples(self, count: int) -> np.ndarray:
        n = np.arange(count)
        return np.sin(2 * np.pi * 8 * n / count).astype(np.float32)


class _CountingFactory:
    def __init__(self) -> None:
        self.created: list[FrequencyAnalyser] = []

    def __call__(self, stream, fft_size: int) -> FrequencyAnalyser:
        analyser = FrequencyAnalyser(stream, fft_size=fft_size)
        self.created.append(analyser)
        return analyser


@pytest.fixture
def canvas() -> _Canvas:
    return _Canvas()


@pytest.fixture
def scheduler() -> _Scheduler:
    return _Scheduler()


@pytest.fixture
def factory() -> _CountingFactory:
    return _CountingFactory()


@pytest.fixture
def visualizer(canvas, scheduler, factory) -> Visualizer:
    return Visualizer(lambda: canvas, scheduler, analyser_factory=factory)


def test_starts_idle(visualizer) -> None:
    assert visualizer.state is VisualizerState.IDLE
    assert visualizer.analyser is None


def test_recording_draws_bars_every_frame(visualizer, canvas, scheduler) -> None:
    visualizer.update(_Stream(), True)

    assert visualizer.state is VisualizerState.ANIMATING
    assert len(scheduler.pending) == 1

    scheduler.run_frame()

    assert canvas.backgrounds == [BACKGROUND_COLOR]
    assert len(canvas.bars) == 128
    assert len(scheduler.pending) == 1

    scheduler.run_frame()
    assert len(canvas.bars) == 256


def test_stopping_cancels_pending_frame_and_clears(visualizer, canvas, scheduler) -> None:
    stream = _Stream()
    visualizer.update(stream, True)
    cleared_before = canvas.cleared

    visualizer.update(stream, False)

    assert visualizer.state is VisualizerState.BOUND
    assert scheduler.pending == {}
    assert scheduler.cancelled == [1]
    assert canvas.cleared > cleared_before


def test_same_stream_reuses_one_analyser(visualizer, factory) -> None:
    stream = _Stream()

    visualizer.update(stream, True)
    visualizer.update(stream, False)
    visualizer.update(stream, True)

    assert len(factory.created) == 1
    assert visualizer.analyser is factory.created[0]


def test_new_stream_rebinds_and_leaves_one_frame_pending(
    visualizer, factory, scheduler
) -> None:
    visualizer.update(_Stream(), True)
    visualizer.update(_Stream(), True)

    assert len(factory.created) == 2
    assert len(scheduler.pending) == 1
    assert visualizer.state is VisualizerState.ANIMATING


def test_stream_without_recording_only_binds(visualizer, scheduler) -> None:
    visualizer.update(_Stream(), False)

    assert visualizer.state is VisualizerState.BOUND
    assert scheduler.pending == {}


def test_teardown_returns_to_idle(visualizer, canvas, scheduler) -> None:
    visualizer.update(_Stream(), True)

    visualizer.teardown()

    assert visualizer.state is VisualizerState.IDLE
    assert scheduler.pending == {}
    assert canvas.cleared >= 1


def test_frame_rechecks_recording_flag(visualizer, canvas, scheduler) -> None:
    visualizer.update(_Stream(), True)
    visualizer._is_recording = False
    cleared_before = canvas.cleared

    scheduler.run_frame()

    assert canvas.bars == []
    assert canvas.backgrounds == []
    assert canvas.cleared == cleared_before + 1
    assert scheduler.pending == {}
    assert visualizer.state is VisualizerState.BOUND


def test_stale_frame_after_stop_draws_nothing(visualizer, canvas, scheduler) -> None:
    stream = _Stream()
    visualizer.update(stream, True)
    stale = scheduler.pending[1]

    visualizer.update(stream, False)
    stale()

    assert canvas.bars == []
    assert scheduler.pending == {}


def test_no_canvas_stays_inert(scheduler, factory) -> None:
    visualizer = Visualizer(lambda: None, scheduler, analyser_factory=factory)

    visualizer.update(_Stream(), True)

    assert visualizer.state is VisualizerState.IDLE
    assert factory.created == []
    assert scheduler.pending == {}


def test_render_bars_layout(canvas) -> None:
    magnitudes = np.array([0, 100, 255], dtype=np.uint8)

    render_bars(canvas, magnitudes)

    width = bar_width(600, 3)
    assert width == pytest.approx(500.0)
    xs = [bar[0] for bar in canvas.bars]
    assert xs == pytest.approx([0.0, width + 2, 2 * (width + 2)])

    _, y, w, h, radius, gradient = canvas.bars[1]
    assert h == 50.0
    assert y == 150.0
    assert w == width
    assert radius == BAR_CORNER_RADIUS
    assert gradient.y_start == 200
    assert gradient.y_end == 150.0


def test_frame_loop_stops_when_step_returns_false(scheduler) -> None:
    results = iter([True, False])
    loop = FrameLoop(scheduler, lambda: next(results))

    loop.start()
    scheduler.run_frame()
    scheduler.run_frame()

    assert loop.frames == 2
    assert not loop.running
    assert scheduler.pending == {}


def test_frame_loop_context_manager_cancels(scheduler) -> None:
    with FrameLoop(scheduler, lambda: True) as loop:
        assert loop.running
        assert len(scheduler.pending) == 1

    assert not loop.running
    assert scheduler.pending == {}
