"""
Application state and controller for the VibeSync dashboard.

AppState is a plain container owned by AppController; nothing here is a
module-level singleton. Views never touch the state directly: they call
controller operations and render the immutable snapshots the controller
publishes to its listeners after every change.

Remote results are reflected locally only after the server call resolves.
Analysis failures and microphone problems are alerted to the user;
persistence failures are logged only. Nothing is retried.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from vibesync.dashboard.common.api_client import APIClient, APIConnectionError, APIError
from vibesync.dashboard.common.audio_recorder import (
    AudioRecorder,
    LiveAudioStream,
    MicrophoneAccessError,
    RecorderStateError,
)
from vibesync.dashboard.common.models import (
    DEFAULT_LANGUAGE,
    AppStateSnapshot,
    AppView,
    AudioAnalysis,
    ChatMessage,
    Language,
    Note,
    Recommendation,
    find_analysis,
)
from vibesync.dashboard.common.translations import toggle_language, translate

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "Could not analyze audio. Please try again."

RecorderFactory = Callable[[], AudioRecorder]
AlertCallback = Callable[[str], None]
StateListener = Callable[[AppStateSnapshot], None]

_REMOTE_ERRORS = (APIError, APIConnectionError)


def recommendation_note_text(recommendation: Recommendation) -> str:
    return (
        f"Must check out {recommendation.title} by {recommendation.artist}. "
        f"Vibe: {recommendation.reason}"
    )


def related_analysis_label(
    history: "list[AudioAnalysis] | tuple[AudioAnalysis, ...]", note: Note
) -> str | None:
    """Label a note by its analysis as "genre - mood"; None if it is gone."""
    analysis = find_analysis(history, note.related_analysis_id)
    if analysis is None:
        return None
    return f"{analysis.detected_genre} - {analysis.mood}"


@dataclass
class AppState:
    """Mutable application state. Only AppController writes to it."""

    language: Language = DEFAULT_LANGUAGE
    active_view: AppView = AppView.ANALYZER
    is_recording: bool = False
    is_analyzing: bool = False
    history: list[AudioAnalysis] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)
    current_analysis: AudioAnalysis | None = None
    chat_open: bool = False
    chat_messages: list[ChatMessage] = field(default_factory=list)
    audio_stream: LiveAudioStream | None = None

    def snapshot(self) -> AppStateSnapshot:
        return AppStateSnapshot(
            language=self.language,
            active_view=self.active_view,
            is_recording=self.is_recording,
            is_analyzing=self.is_analyzing,
            history=tuple(self.history),
            notes=tuple(self.notes),
            current_analysis=self.current_analysis,
            chat_open=self.chat_open,
            chat_messages=tuple(self.chat_messages),
            audio_stream=self.audio_stream,
        )


class AppController:
    """
    Owns AppState and implements every user-facing operation.

    Collaborators are injected: the API client, a factory producing a fresh
    AudioRecorder per session, and an alert callback for user-visible
    errors.
    """

    def __init__(
        self,
        api_client: APIClient,
        recorder_factory: RecorderFactory,
        alert: AlertCallback | None = None,
        language: Language = DEFAULT_LANGUAGE,
    ):
        self._api = api_client
        self._recorder_factory = recorder_factory
        self._alert = alert or (lambda message: logger.warning(f"Alert: {message}"))
        self._state = AppState(language=language)
        self._state.chat_messages = self._greeting()
        self._recorder: AudioRecorder | None = None
        self._listeners: list[StateListener] = []

    # =========================================================================
    # State access
    # =========================================================================

    @property
    def state(self) -> AppStateSnapshot:
        return self._state.snapshot()

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        snapshot = self._state.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def t(self, key: str) -> str:
        """Translate a UI key into the current language."""
        return translate(self._state.language, key)

    def _greeting(self) -> list[ChatMessage]:
        return [ChatMessage("assistant", self.t("chat_intro"))]

    # =========================================================================
    # Startup
    # =========================================================================

    async def load(self) -> None:
        """Fetch history and notes. The chat transcript is left alone."""
        try:
            self._state.history = await self._api.get_history()
        except _REMOTE_ERRORS as e:
            logger.error(f"Failed to load history: {e}")

        try:
            self._state.notes = await self._api.get_notes()
        except _REMOTE_ERRORS as e:
            logger.error(f"Failed to load notes: {e}")

        logger.info(
            f"Loaded {len(self._state.history)} analyses and "
            f"{len(self._state.notes)} notes"
        )
        self._notify()

    # =========================================================================
    # Recording and analysis
    # =========================================================================

    async def start_recording(self) -> bool:
        """
        Acquire the microphone and start recording.

        Returns:
            True if recording started
        """
        if self._state.is_recording or self._state.is_analyzing:
            return False

        recorder = self._recorder_factory()
        try:
            stream = recorder.start()
        except MicrophoneAccessError as e:
            logger.error(f"Error accessing microphone: {e.__cause__ or e}")
            self._alert(str(e))
            return False

        self._recorder = recorder
        self._state.audio_stream = stream
        self._state.is_recording = True
        self._notify()
        return True

    async def stop_recording(self) -> AudioAnalysis | None:
        """
        Stop recording and analyse the clip.

        The recorder is fully stopped (final chunk flushed, microphone
        released) before the analysis request is issued.
        """
        recorder = self._recorder
        if not self._state.is_recording or recorder is None:
            return None

        self._state.is_recording = False
        self._recorder = None

        try:
            wav_bytes = recorder.stop()
        except RecorderStateError as e:
            logger.error(f"Recorder was not running: {e}")
            self._state.audio_stream = None
            self._notify()
            return None

        self._state.audio_stream = None
        self._notify()

        return await self.handle_analysis(wav_bytes)

    async def handle_analysis(self, audio: bytes) -> AudioAnalysis | None:
        """
        Analyse a clip, show the result and store it in history.

        The new analysis gets its id and timestamp here and is prepended to
        history once the server has stored it.
        """
        self._state.is_analyzing = True
        self._notify()

        try:
            try:
                payload = await self._api.analyze_audio(audio, self._state.language)
            except _REMOTE_ERRORS as e:
                logger.error(f"Analysis failed: {e}")
                self._alert(ANALYSIS_FAILED_MESSAGE)
                return None

            analysis = AudioAnalysis.create(payload)
            self._state.current_analysis = analysis
            self._state.active_view = AppView.ANALYZER
            self._notify()

            try:
                await self._api.save_analysis(analysis)
            except _REMOTE_ERRORS as e:
                logger.error(f"Failed to save analysis: {e}")
            else:
                self._state.history.insert(0, analysis)

            return analysis
        finally:
            self._state.is_analyzing = False
            self._notify()

    def select_analysis(self, analysis: AudioAnalysis) -> None:
        """Show a past analysis in the Analyzer view."""
        self._state.current_analysis = analysis
        self._state.active_view = AppView.ANALYZER
        self._notify()

    # =========================================================================
    # Notes
    # =========================================================================

    async def add_note(
        self, content: str, related_analysis_id: str | None = None
    ) -> Note | None:
        """Create a note. Blank content is ignored."""
        if not content or not content.strip():
            return None

        note = Note.create(content, related_analysis_id)
        try:
            await self._api.save_note(note)
        except _REMOTE_ERRORS as e:
            logger.error(f"Failed to save note: {e}")
            return None

        self._state.notes.insert(0, note)
        self._notify()
        return note

    async def add_recommendation_note(
        self, analysis: AudioAnalysis, recommendation: Recommendation
    ) -> Note | None:
        return await self.add_note(recommendation_note_text(recommendation), analysis.id)

    async def delete_note(self, note_id: str) -> bool:
        """
        Delete exactly one note.

        A note the server no longer knows is dropped locally as well.
        """
        try:
            removed = await self._api.delete_note(note_id)
        except _REMOTE_ERRORS as e:
            logger.error(f"Failed to delete note: {e}")
            return False

        if not removed:
            logger.info(f"Note {note_id} was already gone on the server")

        self._state.notes = [n for n in self._state.notes if n.id != note_id]
        self._notify()
        return True

    def related_analysis_label(self, note: Note) -> str | None:
        return related_analysis_label(self._state.history, note)

    # =========================================================================
    # Chat
    # =========================================================================

    async def send_chat_message(self, text: str) -> str | None:
        """
        Send a chat message.

        The user turn is shown immediately; the reply (or the localized error
        text) is appended when the call resolves.
        """
        if not text or not text.strip():
            return None

        prior = list(self._state.chat_messages)
        self._state.chat_messages.append(ChatMessage("user", text))
        self._notify()

        try:
            reply = await self._api.chat(prior, text, self._state.language)
        except _REMOTE_ERRORS as e:
            logger.error(f"Chat failed: {e}")
            reply = self.t("chat_error")

        if reply:
            self._state.chat_messages.append(ChatMessage("assistant", reply))
            self._notify()
        return reply

    def toggle_chat(self) -> None:
        self._state.chat_open = not self._state.chat_open
        self._notify()

    # =========================================================================
    # Navigation and language
    # =========================================================================

    def set_view(self, view: AppView) -> None:
        self._state.active_view = view
        self._notify()

    def toggle_language(self) -> None:
        """
        Switch between Spanish and English.

        A transcript holding at most the greeting is re-seeded in the new
        language; a conversation in progress is left as is.
        """
        self._state.language = toggle_language(self._state.language)
        messages = self._state.chat_messages
        if len(messages) <= 1 and all(m.role == "assistant" for m in messages):
            self._state.chat_messages = self._greeting()
        self._notify()

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def shutdown(self) -> None:
        """Release the microphone if still held and close the HTTP session."""
        if self._recorder is not None:
            self._recorder.cancel()
            self._recorder = None
        self._state.is_recording = False
        self._state.audio_stream = None
        await self._api.close()

    def debug_info(self) -> dict[str, Any]:
        state = self._state
        return {
            "language": state.language,
            "view": state.active_view.value,
            "recording": state.is_recording,
            "analyzing": state.is_analyzing,
            "history": len(state.history),
            "notes": len(state.notes),
            "chat_messages": len(state.chat_messages),
        }
