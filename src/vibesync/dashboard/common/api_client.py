"""
API client for VibeSync server communication.

Handles:
- Persistence of analyses and notes
- Audio analysis requests (clip upload, structured result)
- Chat requests to the VibeBot assistant

No request is retried; every failure surfaces to the caller.
"""

import asyncio
import base64
import json
import logging
import socket
import ssl
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import aiohttp

from vibesync import __version__
from vibesync.dashboard.common.models import (
    AnalysisPayload,
    AudioAnalysis,
    ChatMessage,
    Note,
)

logger = logging.getLogger(__name__)

CLIENT_VERSION = __version__


class APIError(Exception):
    """The server answered with an error status or an unusable body."""

    def __init__(self, status: int, detail: str):
        self.status = status
        self.detail = detail
        super().__init__(f"HTTP {status}: {detail}")


class APIConnectionError(Exception):
    """The server could not be reached."""


class APIClient:
    """
    HTTP client for the VibeSync server.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3005,
        use_https: bool = False,
        timeout: int = 30,
        analysis_timeout: int = 180,
    ):
        """
        Initialize the API client.

        Args:
            host: Server hostname
            port: Server port
            use_https: Use HTTPS
            timeout: Default request timeout in seconds
            analysis_timeout: Timeout for analysis and chat requests
        """
        self.host = host
        self.port = port
        self.use_https = use_https
        self.timeout = timeout
        self.analysis_timeout = analysis_timeout

        self._session: aiohttp.ClientSession | None = None
        self._session_loop: asyncio.AbstractEventLoop | None = None

        logger.info(f"API Client initialized: {self.base_url}")

    @property
    def base_url(self) -> str:
        """Get the base URL for API requests."""
        scheme = "https" if self.use_https else "http"
        return f"{scheme}://{self.host}:{self.port}"

    def _get_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "User-Agent": f"VibeSync-Dashboard/{CLIENT_VERSION}",
        }

    def _is_localhost(self) -> bool:
        return self.host in ("localhost", "127.0.0.1", "::1")

    async def _get_session(self) -> aiohttp.ClientSession:
        """
        Get or create the aiohttp session.

        A session is bound to the event loop that created it; a call from a
        different loop closes the old session and opens a new one.
        """
        loop = asyncio.get_running_loop()

        if (
            self._session is not None
            and not self._session.closed
            and self._session_loop is not loop
        ):
            logger.debug("Event loop changed; recreating aiohttp session")
            try:
                await self._session.close()
            except (RuntimeError, aiohttp.ClientError) as e:
                logger.debug(f"Closing stale session failed: {e}")
            self._session = None

        if self._session is None or self._session.closed:
            ssl_context = ssl.create_default_context() if self.use_https else None

            connector = aiohttp.TCPConnector(
                ssl=ssl_context,
                family=socket.AF_INET if self._is_localhost() else 0,
            )
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                connector=connector,
                headers=self._get_headers(),
            )
            self._session_loop = loop
            logger.debug(f"New aiohttp session created (HTTPS: {self.use_https})")

        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._session_loop = None

    async def _request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises:
            APIError: Non-2xx status or a body that is not JSON
            APIConnectionError: Network failure or timeout
        """
        url = f"{self.base_url}{path}"
        kwargs: dict[str, Any] = {}
        if payload is not None:
            kwargs["json"] = payload
        if timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)

        session = await self._get_session()
        try:
            async with session.request(method, url, **kwargs) as resp:
                if resp.status >= 400:
                    detail = await self._error_detail(resp)
                    logger.warning(f"{method} {path} failed: {resp.status} {detail}")
                    raise APIError(resp.status, detail)

                text = await resp.text()
                try:
                    return json.loads(text) if text else None
                except json.JSONDecodeError as e:
                    raise APIError(resp.status, "Invalid JSON response") from e

        except aiohttp.ClientError as e:
            logger.error(f"{method} {url} failed: {type(e).__name__}: {e}")
            raise APIConnectionError(f"Cannot reach server at {self.base_url}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"{method} {url} timed out")
            raise APIConnectionError(f"Request to {self.base_url} timed out") from e

    @staticmethod
    async def _error_detail(resp: Any) -> str:
        """Extract FastAPI's ``detail`` field, falling back to the raw text."""
        text = await resp.text()
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError):
            return text or f"HTTP {resp.status}"
        if isinstance(data, dict) and "detail" in data:
            detail = data["detail"]
            return detail if isinstance(detail, str) else json.dumps(detail)
        return text

    # =========================================================================
    # Status
    # =========================================================================

    async def health_check(self) -> bool:
        """Return True when the server answers /health."""
        try:
            await self._request("GET", "/health")
            return True
        except (APIError, APIConnectionError) as e:
            logger.warning(f"Health check failed: {e}")
            return False

    async def get_status(self) -> dict[str, Any]:
        return await self._request("GET", "/api/status")

    # =========================================================================
    # Persistence
    # =========================================================================

    async def get_history(self) -> list[AudioAnalysis]:
        """Fetch all analyses, newest first."""
        data = await self._request("GET", "/api/history")
        if not isinstance(data, list):
            raise APIError(200, "History response is not a list")

        history: list[AudioAnalysis] = []
        for item in data:
            try:
                history.append(AudioAnalysis.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed history entry: {e}")
        return history

    async def save_analysis(self, analysis: AudioAnalysis) -> str:
        """Persist one analysis. Returns the stored id."""
        data = await self._request("POST", "/api/history", analysis.to_dict())
        return str(data.get("id", analysis.id)) if isinstance(data, dict) else analysis.id

    async def get_notes(self) -> list[Note]:
        """Fetch all notes, newest first."""
        data = await self._request("GET", "/api/notes")
        if not isinstance(data, list):
            raise APIError(200, "Notes response is not a list")

        notes: list[Note] = []
        for item in data:
            try:
                notes.append(Note.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed note: {e}")
        return notes

    async def save_note(self, note: Note) -> str:
        """Persist one note. Returns the stored id."""
        data = await self._request("POST", "/api/notes", note.to_dict())
        return str(data.get("id", note.id)) if isinstance(data, dict) else note.id

    async def delete_note(self, note_id: str) -> bool:
        """
        Delete one note.

        Returns:
            True if the server removed it, False if the server did not know it
        """
        try:
            await self._request("DELETE", f"/api/notes/{quote(note_id, safe='')}")
            return True
        except APIError as e:
            if e.status == 404:
                return False
            raise

    # =========================================================================
    # Analysis and chat
    # =========================================================================

    async def analyze_audio(
        self,
        wav_bytes: bytes,
        language: str,
        mime_type: str = "audio/wav",
    ) -> AnalysisPayload:
        """
        Send a clip for analysis.

        Raises:
            APIError: Server error or a malformed analysis body
            APIConnectionError: Server unreachable
        """
        body = {
            "audio": base64.b64encode(wav_bytes).decode("ascii"),
            "mimeType": mime_type,
            "language": language,
        }
        logger.info(f"Uploading {len(wav_bytes)} bytes for analysis ({language})")
        data = await self._request(
            "POST", "/api/analyze", body, timeout=self.analysis_timeout
        )

        if not isinstance(data, dict):
            raise APIError(200, "Analysis response is not an object")
        try:
            return AnalysisPayload.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise APIError(200, f"Malformed analysis response: {e}") from e

    async def chat(
        self,
        transcript: Sequence[ChatMessage],
        message: str,
        language: str,
    ) -> str:
        """Send a chat message with the prior transcript; returns the reply."""
        body = {
            "history": [m.to_dict() for m in transcript],
            "message": message,
            "language": language,
        }
        data = await self._request("POST", "/api/chat", body, timeout=self.analysis_timeout)

        if not isinstance(data, dict) or not isinstance(data.get("reply"), str):
            raise APIError(200, "Malformed chat response")
        return data["reply"]
