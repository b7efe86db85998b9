"""Tests for the dashboard application controller."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from vibesync.dashboard.common.api_client import APIConnectionError, APIError
from vibesync.dashboard.common.audio_recorder import (
    MICROPHONE_ACCESS_MESSAGE,
    MicrophoneAccessError,
)
from vibesync.dashboard.common.controller import (
    ANALYSIS_FAILED_MESSAGE,
    AppController,
    recommendation_note_text,
    related_analysis_label,
)
from vibesync.dashboard.common.models import (
    AnalysisPayload,
    AppView,
    AudioAnalysis,
    ChatMessage,
    Note,
    Recommendation,
)
from vibesync.dashboard.common.translations import translate

_REC = Recommendation("Vulfpeck", "Dean Town", "Bass-forward", 92)
_PAYLOAD = AnalysisPayload(
    detected_genre="Funk",
    mood="Groovy",
    tempo="112 BPM",
    key_elements=("slap bass",),
    vibe_description="Tight pocket.",
    recommendations=(_REC,),
)


class _FakeAPI:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.history: list[AudioAnalysis] = []
        self.notes: list[Note] = []
        self.errors: dict[str, Exception] = {}
        self.reply = "Try Vulfpeck."
        self.delete_result = True
        self.payload = _PAYLOAD
        self.gates: dict[str, asyncio.Event] = {}
        self.closed = False

    async def _wait(self, name: str) -> None:
        if name in self.gates:
            await self.gates[name].wait()

    def _maybe_fail(self, name: str) -> None:
        if name in self.errors:
            raise self.errors[name]

    async def get_history(self) -> list[AudioAnalysis]:
        self.calls.append(("get_history", None))
        await self._wait("get_history")
        self._maybe_fail("get_history")
        return list(self.history)

    async def get_notes(self) -> list[Note]:
        self.calls.append(("get_notes", None))
        self._maybe_fail("get_notes")
        return list(self.notes)

    async def analyze_audio(self, wav_bytes: bytes, language: str) -> AnalysisPayload:
        self.calls.append(("analyze_audio", (wav_bytes, language)))
        self._maybe_fail("analyze_audio")
        return self.payload

    async def save_analysis(self, analysis: AudioAnalysis) -> str:
        self.calls.append(("save_analysis", analysis))
        self._maybe_fail("save_analysis")
        return analysis.id

    async def save_note(self, note: Note) -> str:
        self.calls.append(("save_note", note))
        self._maybe_fail("save_note")
        return note.id

    async def delete_note(self, note_id: str) -> bool:
        self.calls.append(("delete_note", note_id))
        self._maybe_fail("delete_note")
        return self.delete_result

    async def chat(self, transcript, message: str, language: str) -> str:
        self.calls.append(("chat", (list(transcript), message, language)))
        await self._wait("chat")
        self._maybe_fail("chat")
        return self.reply

    async def close(self) -> None:
        self.closed = True


class _FakeRecorder:
    def __init__(self, start_error: Exception | None = None):
        self.start_error = start_error
        self.stream = object()
        self.started = False
        self.stopped = False
        self.cancelled = False

    def start(self) -> Any:
        if self.start_error is not None:
            raise self.start_error
        self.started = True
        return self.stream

    def stop(self) -> bytes:
        self.stopped = True
        return b"RIFFclip"

    def cancel(self) -> None:
        self.cancelled = True


class _Harness:
    def __init__(self, recorder_error: Exception | None = None, language: str = "es"):
        self.api = _FakeAPI()
        self.recorders: list[_FakeRecorder] = []
        self.alerts: list[str] = []
        self.snapshots: list[Any] = []
        self._recorder_error = recorder_error
        self.controller = AppController(
            self.api,
            self._make_recorder,
            alert=self.alerts.append,
            language=language,
        )
        self.controller.add_listener(self.snapshots.append)

    def _make_recorder(self) -> _FakeRecorder:
        recorder = _FakeRecorder(self._recorder_error)
        self.recorders.append(recorder)
        return recorder

    def call_names(self) -> list[str]:
        return [name for name, _ in self.api.calls]


def _analysis(analysis_id: str = "a1") -> AudioAnalysis:
    return AudioAnalysis(
        id=analysis_id,
        timestamp=1,
        detected_genre="Funk",
        mood="Groovy",
        tempo="112 BPM",
    )


@pytest.mark.asyncio
async def test_load_fetches_data_and_seeds_greeting() -> None:
    h = _Harness()
    h.api.history = [_analysis()]
    h.api.notes = [Note.create("hello")]

    await h.controller.load()

    state = h.controller.state
    assert len(state.history) == 1
    assert len(state.notes) == 1
    assert state.chat_messages == (ChatMessage("assistant", translate("es", "chat_intro")),)
    assert h.snapshots[-1] == state


@pytest.mark.asyncio
async def test_load_failures_leave_empty_lists() -> None:
    h = _Harness()
    h.api.errors["get_history"] = APIConnectionError("down")
    h.api.errors["get_notes"] = APIError(500, "boom")

    await h.controller.load()

    assert h.controller.state.history == ()
    assert h.controller.state.notes == ()
    assert h.alerts == []


@pytest.mark.asyncio
async def test_record_then_analyse_prepends_saved_analysis() -> None:
    h = _Harness(language="en")
    older = _analysis("old")
    h.controller._state.history = [older]
    h.controller.set_view(AppView.NOTES)

    assert await h.controller.start_recording() is True
    recorder = h.recorders[0]
    assert h.controller.state.is_recording
    assert h.controller.state.audio_stream is recorder.stream

    analysis = await h.controller.stop_recording()

    assert recorder.stopped
    assert analysis is not None
    assert analysis.detected_genre == "Funk"
    state = h.controller.state
    assert state.history == (analysis, older)
    assert state.current_analysis is analysis
    assert state.active_view is AppView.ANALYZER
    assert not state.is_recording
    assert not state.is_analyzing
    assert state.audio_stream is None
    assert h.api.calls[0] == ("analyze_audio", (b"RIFFclip", "en"))
    assert h.call_names() == ["analyze_audio", "save_analysis"]
    assert any(s.is_analyzing for s in h.snapshots)


@pytest.mark.asyncio
async def test_start_is_refused_while_busy() -> None:
    h = _Harness()
    await h.controller.start_recording()

    assert await h.controller.start_recording() is False
    assert len(h.recorders) == 1


@pytest.mark.asyncio
async def test_stop_without_recording_is_a_no_op() -> None:
    h = _Harness()

    assert await h.controller.stop_recording() is None
    assert h.api.calls == []


@pytest.mark.asyncio
async def test_microphone_denied_alerts_user() -> None:
    h = _Harness(recorder_error=MicrophoneAccessError())

    assert await h.controller.start_recording() is False

    assert h.alerts == [MICROPHONE_ACCESS_MESSAGE]
    assert not h.controller.state.is_recording


@pytest.mark.asyncio
async def test_analysis_failure_alerts_and_keeps_history() -> None:
    h = _Harness()
    h.api.errors["analyze_audio"] = APIError(502, "Analysis service returned an error")

    result = await h.controller.handle_analysis(b"clip")

    assert result is None
    assert h.alerts == [ANALYSIS_FAILED_MESSAGE]
    assert h.controller.state.history == ()
    assert h.controller.state.current_analysis is None
    assert not h.controller.state.is_analyzing


@pytest.mark.asyncio
async def test_unsaved_analysis_is_shown_but_not_in_history() -> None:
    h = _Harness()
    h.api.errors["save_analysis"] = APIConnectionError("down")

    analysis = await h.controller.handle_analysis(b"clip")

    assert h.controller.state.current_analysis is analysis
    assert h.controller.state.history == ()
    assert h.alerts == []


@pytest.mark.asyncio
async def test_no_key_placeholder_is_stored_like_any_result() -> None:
    h = _Harness()
    h.controller._state.history = [_analysis("old")]
    h.api.payload = AnalysisPayload.from_dict(
        {
            "detectedGenre": "Unknown (No API Key)",
            "mood": "N/A",
            "tempo": "0 BPM",
            "keyElements": ["Missing API Key"],
            "vibeDescription": "Please add a valid GEMINI_API_KEY.",
            "recommendations": [],
        }
    )

    analysis = await h.controller.handle_analysis(b"clip")

    assert analysis is not None
    assert analysis.id != "old"
    assert analysis.timestamp > 1
    assert analysis.detected_genre == "Unknown (No API Key)"
    assert analysis.recommendations == ()
    assert h.controller.state.history[0] is analysis
    assert h.api.calls[-1] == ("save_analysis", analysis)
    assert h.alerts == []


@pytest.mark.asyncio
async def test_add_note_prepends_after_save() -> None:
    h = _Harness()
    first = await h.controller.add_note("first")
    second = await h.controller.add_note("second", related_analysis_id="a1")

    assert h.controller.state.notes == (second, first)
    assert second.related_analysis_id == "a1"


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   \n"])
async def test_blank_note_is_ignored(content: str) -> None:
    h = _Harness()

    assert await h.controller.add_note(content) is None
    assert h.api.calls == []


@pytest.mark.asyncio
async def test_failed_note_save_is_not_shown() -> None:
    h = _Harness()
    h.api.errors["save_note"] = APIConnectionError("down")

    assert await h.controller.add_note("lost") is None
    assert h.controller.state.notes == ()


@pytest.mark.asyncio
async def test_recommendation_note_links_analysis() -> None:
    h = _Harness()
    analysis = _analysis()

    note = await h.controller.add_recommendation_note(analysis, _REC)

    assert note.content == "Must check out Dean Town by Vulfpeck. Vibe: Bass-forward"
    assert note.content == recommendation_note_text(_REC)
    assert note.related_analysis_id == "a1"


@pytest.mark.asyncio
async def test_delete_note_removes_exactly_one() -> None:
    h = _Harness()
    keep = await h.controller.add_note("keep")
    drop = await h.controller.add_note("drop")

    assert await h.controller.delete_note(drop.id) is True

    assert h.controller.state.notes == (keep,)
    assert h.api.calls[-1] == ("delete_note", drop.id)


@pytest.mark.asyncio
async def test_delete_note_already_gone_on_server_is_dropped_locally() -> None:
    h = _Harness()
    note = await h.controller.add_note("stale")
    h.api.delete_result = False

    assert await h.controller.delete_note(note.id) is True
    assert h.controller.state.notes == ()


@pytest.mark.asyncio
async def test_delete_note_failure_keeps_note() -> None:
    h = _Harness()
    note = await h.controller.add_note("sticky")
    h.api.errors["delete_note"] = APIError(500, "boom")

    assert await h.controller.delete_note(note.id) is False
    assert h.controller.state.notes == (note,)


def test_related_analysis_label() -> None:
    history = [_analysis("a1")]

    assert related_analysis_label(history, Note.create("x", "a1")) == "Funk - Groovy"
    assert related_analysis_label(history, Note.create("x", "gone")) is None
    assert related_analysis_label(history, Note.create("x")) is None


@pytest.mark.asyncio
async def test_chat_sends_prior_transcript_and_appends_reply() -> None:
    h = _Harness()
    await h.controller.load()
    greeting = h.controller.state.chat_messages

    reply = await h.controller.send_chat_message("something funky?")

    assert reply == "Try Vulfpeck."
    assert h.api.calls[-1] == ("chat", (list(greeting), "something funky?", "es"))
    assert h.controller.state.chat_messages[1:] == (
        ChatMessage("user", "something funky?"),
        ChatMessage("assistant", "Try Vulfpeck."),
    )


@pytest.mark.asyncio
async def test_chat_failure_appends_localized_error() -> None:
    h = _Harness(language="en")
    h.api.errors["chat"] = APIConnectionError("down")

    reply = await h.controller.send_chat_message("hi")

    assert reply == translate("en", "chat_error")
    assert h.controller.state.chat_messages[-1] == ChatMessage("assistant", reply)


@pytest.mark.asyncio
async def test_blank_chat_message_is_ignored() -> None:
    h = _Harness()

    assert await h.controller.send_chat_message("  ") is None
    assert h.controller.state.chat_messages == (
        ChatMessage("assistant", translate("es", "chat_intro")),
    )


@pytest.mark.asyncio
async def test_toggle_language_reseeds_untouched_chat() -> None:
    h = _Harness()
    await h.controller.load()

    h.controller.toggle_language()

    assert h.controller.state.language == "en"
    assert h.controller.state.chat_messages == (
        ChatMessage("assistant", translate("en", "chat_intro")),
    )


@pytest.mark.asyncio
async def test_toggle_language_keeps_conversation() -> None:
    h = _Harness()
    await h.controller.load()
    await h.controller.send_chat_message("hola")
    before = h.controller.state.chat_messages

    h.controller.toggle_language()

    assert h.controller.state.language == "en"
    assert h.controller.state.chat_messages == before


@pytest.mark.asyncio
async def test_toggle_language_keeps_message_awaiting_reply() -> None:
    h = _Harness()
    h.api.gates["chat"] = asyncio.Event()
    greeting = ChatMessage("assistant", translate("es", "chat_intro"))

    pending = asyncio.create_task(h.controller.send_chat_message("hola"))
    await asyncio.sleep(0)
    h.controller.toggle_language()

    assert h.controller.state.language == "en"
    assert h.controller.state.chat_messages == (greeting, ChatMessage("user", "hola"))

    h.api.gates["chat"].set()
    await pending

    assert h.controller.state.chat_messages == (
        greeting,
        ChatMessage("user", "hola"),
        ChatMessage("assistant", "Try Vulfpeck."),
    )


@pytest.mark.asyncio
async def test_chat_during_slow_load_is_kept() -> None:
    h = _Harness()
    h.api.history = [_analysis()]
    h.api.gates["get_history"] = asyncio.Event()

    loading = asyncio.create_task(h.controller.load())
    await asyncio.sleep(0)
    await h.controller.send_chat_message("hello")

    h.api.gates["get_history"].set()
    await loading

    state = h.controller.state
    assert len(state.history) == 1
    assert state.chat_messages == (
        ChatMessage("assistant", translate("es", "chat_intro")),
        ChatMessage("user", "hello"),
        ChatMessage("assistant", "Try Vulfpeck."),
    )


def test_navigation_and_chat_toggle() -> None:
    h = _Harness()
    analysis = _analysis()

    h.controller.set_view(AppView.HISTORY)
    assert h.controller.state.active_view is AppView.HISTORY

    h.controller.select_analysis(analysis)
    assert h.controller.state.active_view is AppView.ANALYZER
    assert h.controller.state.current_analysis is analysis

    h.controller.toggle_chat()
    assert h.controller.state.chat_open
    h.controller.toggle_chat()
    assert not h.controller.state.chat_open


def test_removed_listener_is_not_notified() -> None:
    h = _Harness()
    h.controller.remove_listener(h.snapshots.append)

    h.controller.toggle_chat()

    assert h.snapshots == []


@pytest.mark.asyncio
async def test_shutdown_releases_recorder_and_closes_client() -> None:
    h = _Harness()
    await h.controller.start_recording()

    await h.controller.shutdown()

    assert h.recorders[0].cancelled
    assert h.api.closed
    assert not h.controller.state.is_recording
    assert h.controller.debug_info()["recording"] is False
