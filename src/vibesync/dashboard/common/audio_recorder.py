"""
Microphone recording for the VibeSync dashboard.

Handles:
- Microphone input through PyAudio on a reader thread
- A live sample buffer that feeds the frequency visualizer
- WAV output for server-side analysis

The microphone belongs to one recording session at a time and is released
exactly once when that session stops.
"""

import io
import logging
import threading
import wave
from typing import TYPE_CHECKING, Any

import numpy as np

logger = logging.getLogger(__name__)

# Audio constants
SAMPLE_RATE = 44100
CHANNELS = 1
CHUNK_SIZE = 1024
SAMPLE_WIDTH = 2  # 16-bit audio

# Samples kept for the visualizer; well above the largest FFT window in use
LIVE_BUFFER_SAMPLES = 8192

MICROPHONE_ACCESS_MESSAGE = "Please allow microphone access to use VibeSync."

# Try to import PyAudio
HAS_PYAUDIO = False
if TYPE_CHECKING:
    import pyaudio
else:
    try:
        import pyaudio

        HAS_PYAUDIO = True
    except ImportError:
        pyaudio = None


class MicrophoneAccessError(Exception):
    """The microphone could not be opened (permission denied or no device)."""

    def __init__(self, message: str = MICROPHONE_ACCESS_MESSAGE):
        super().__init__(message)


class RecorderStateError(Exception):
    """A recorder operation was called in the wrong state."""


class LiveAudioStream:
    """
    Handle for an open microphone stream.

    Owns the PyAudio instance and its input stream. The reader thread pushes
    every chunk into a bounded buffer of float samples that the visualizer
    reads from; ``release()`` closes everything exactly once.
    """

    def __init__(
        self,
        audio: Any,
        stream: Any,
        sample_rate: int,
        channels: int = CHANNELS,
        buffer_samples: int = LIVE_BUFFER_SAMPLES,
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self._audio = audio
        self._stream = stream
        self._buffer_samples = buffer_samples
        self._samples = np.zeros(0, dtype=np.float32)
        self._lock = threading.Lock()
        self._released = False
        self.release_count = 0

    @property
    def released(self) -> bool:
        return self._released

    def read(self, num_frames: int) -> bytes:
        """Blocking read of one chunk from the device."""
        if self._released:
            raise RecorderStateError("Stream already released")
        return self._stream.read(num_frames, exception_on_overflow=False)

    def push(self, data: bytes) -> None:
        """Append raw int16 frames to the live sample buffer."""
        samples = np.frombuffer(data, dtype=np.int16).astype(np.float32) / 32768.0
        if self.channels > 1:
            usable = len(samples) - len(samples) % self.channels
            samples = samples[:usable].reshape(-1, self.channels).mean(axis=1)

        with self._lock:
            combined = np.concatenate((self._samples, samples))
            self._samples = combined[-self._buffer_samples :]

    def latest_samples(self, count: int) -> np.ndarray:
        """
        Return the newest ``count`` samples as float32 in [-1, 1].

        Missing history is zero padded at the front.
        """
        out = np.zeros(count, dtype=np.float32)
        with self._lock:
            available = self._samples[-count:] if count else self._samples[:0]
            if len(available):
                out[count - len(available) :] = available
        return out

    def release(self) -> None:
        """Stop the stream and terminate PyAudio. Later calls are no-ops."""
        with self._lock:
            if self._released:
                return
            self._released = True
            self.release_count += 1
            self._samples = np.zeros(0, dtype=np.float32)

        if self._stream is not None:
            try:
                self._stream.stop_stream()
                self._stream.close()
            except Exception:
                logger.debug("Failed to stop/close audio stream during release")
            self._stream = None

        if self._audio is not None:
            try:
                self._audio.terminate()
            except Exception:
                logger.debug("Failed to terminate PyAudio during release")
            self._audio = None

        logger.debug("Microphone released")


class AudioRecorder:
    """
    Microphone recorder producing WAV clips.
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        channels: int = CHANNELS,
        chunk_size: int = CHUNK_SIZE,
        device_index: int | None = None,
        pyaudio_module: Any = None,
    ):
        """
        Initialize the audio recorder.

        Args:
            sample_rate: Audio sample rate
            channels: Number of audio channels (default 1 for mono)
            chunk_size: Frames per read from the device
            device_index: Input device index (None for default)
            pyaudio_module: Module providing PyAudio() and paInt16
                (defaults to the installed pyaudio)
        """
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_size = chunk_size
        self.device_index = device_index
        self._pyaudio = pyaudio_module if pyaudio_module is not None else pyaudio

        self._live: LiveAudioStream | None = None
        self._recording = False
        self._thread: threading.Thread | None = None
        self._frames: list[bytes] = []

    def start(self) -> LiveAudioStream:
        """
        Open the microphone and start recording.

        Returns:
            The live stream handle for the visualizer

        Raises:
            MicrophoneAccessError: If the device cannot be opened
            RecorderStateError: If already recording
        """
        if self._recording:
            raise RecorderStateError("Already recording")

        if self._pyaudio is None:
            logger.error("PyAudio is not available")
            raise MicrophoneAccessError()

        audio = None
        stream = None
        try:
            audio = self._pyaudio.PyAudio()
            stream = audio.open(
                format=self._pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                input_device_index=self.device_index,
            )
        except Exception as e:
            logger.error(f"Failed to open microphone: {e}")
            if stream is not None:
                try:
                    stream.close()
                except Exception:
                    logger.debug("Failed to close partially opened stream")
            if audio is not None:
                try:
                    audio.terminate()
                except Exception:
                    logger.debug("Failed to terminate PyAudio after open failure")
            raise MicrophoneAccessError() from e

        self._live = LiveAudioStream(audio, stream, self.sample_rate, self.channels)
        self._frames = []
        self._recording = True

        self._thread = threading.Thread(target=self._record_loop, daemon=True)
        self._thread.start()

        logger.info(f"Recording started at {self.sample_rate} Hz")
        return self._live

    def _record_loop(self) -> None:
        """Reader loop that runs in a separate thread."""
        live = self._live
        while self._recording and live is not None:
            try:
                data = live.read(self.chunk_size)
            except Exception as e:
                logger.error(f"Recording error: {e}")
                break
            # The chunk in flight when stop() flips the flag is still kept
            self._frames.append(data)
            live.push(data)

    def stop(self) -> bytes:
        """
        Stop recording and return the clip as WAV bytes.

        Sequential: the reader thread is joined so the final chunk is in the
        clip, then the microphone is released, then the WAV is assembled.

        Raises:
            RecorderStateError: If not recording
        """
        if not self._recording or self._live is None:
            raise RecorderStateError("Not recording")

        self._recording = False

        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None

        frames = self._frames
        self._frames = []

        self._live.release()
        self._live = None

        audio_data = b"".join(frames)
        wav_bytes = self._to_wav(audio_data)

        duration = len(audio_data) / (self.sample_rate * SAMPLE_WIDTH * self.channels)
        logger.info(f"Recording stopped: {duration:.1f}s")
        return wav_bytes

    def cancel(self) -> None:
        """Stop recording, discard audio and release the microphone."""
        if self._live is None:
            return

        self._recording = False
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None

        self._frames = []
        self._live.release()
        self._live = None
        logger.info("Recording cancelled")

    def _to_wav(self, audio_data: bytes) -> bytes:
        wav_buffer = io.BytesIO()
        with wave.open(wav_buffer, "wb") as wav_file:
            wav_file.setnchannels(self.channels)
            wav_file.setsampwidth(SAMPLE_WIDTH)
            wav_file.setframerate(self.sample_rate)
            wav_file.writeframes(audio_data)
        return wav_buffer.getvalue()

    @property
    def is_recording(self) -> bool:
        """Check if currently recording."""
        return self._recording

    @property
    def live_stream(self) -> LiveAudioStream | None:
        return self._live

    @staticmethod
    def list_devices() -> list[dict[str, Any]]:
        """List available microphone input devices."""
        if not HAS_PYAUDIO:
            return []

        devices: list[dict[str, Any]] = []
        audio = None
        try:
            audio = pyaudio.PyAudio()
            for i in range(audio.get_device_count()):
                try:
                    info = audio.get_device_info_by_index(i)
                except (OSError, ValueError):
                    continue
                max_input_channels = int(info.get("maxInputChannels", 0))
                if max_input_channels > 0:
                    devices.append(
                        {
                            "index": i,
                            "name": info.get("name", f"Device {i}"),
                            "channels": max_input_channels,
                            "sample_rate": info.get("defaultSampleRate"),
                        }
                    )
        except OSError as e:
            logger.error(f"Error listing input devices: {e}")
        finally:
            if audio is not None:
                audio.terminate()

        return devices
