"""
On-device summarization capability.

The capability is host-provided: something local that can report whether a
summarization model is usable and hand out short-lived summarizer sessions.
The bundled implementation talks to a local Ollama server:

- availability: GET /api/tags (server down -> "no", model missing ->
  "after-download", model present -> "readily")
- session creation: optional POST /api/pull when a download is allowed
- summarize: POST /api/generate
- destroy: POST /api/generate with keep_alive=0, which unloads the model

Sessions are scoped resources: always use OnDeviceProbe.session() (or
summarizer_session()) so the model is released on every exit path.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

import aiohttp

from visua11y.errors import ResponseParseError
from visua11y.utils.logger import get_logger

logger = get_logger(__name__)


class Availability(str, Enum):
    """Declared availability of the on-device model."""

    NO = "no"
    AFTER_DOWNLOAD = "after-download"
    READILY = "readily"


class SummarizerSession(ABC):
    """A live handle on the local model."""

    @abstractmethod
    async def summarize(self, text: str) -> str:
        """Summarize text with the session's shared context."""
        pass

    @abstractmethod
    async def destroy(self) -> None:
        """Release the underlying model session."""
        pass


class OnDeviceSummarizer(ABC):
    """A local summarization capability."""

    @abstractmethod
    async def availability(self) -> Availability:
        """Query the capability's declared availability."""
        pass

    @abstractmethod
    async def create(self, shared_context: str) -> SummarizerSession:
        """Open a new summarizer session."""
        pass


@asynccontextmanager
async def summarizer_session(
    capability: OnDeviceSummarizer,
    shared_context: str,
) -> AsyncIterator[SummarizerSession]:
    """
    Create a summarizer session and destroy it on exit.

    Errors raised while creating or using the session propagate to the
    caller. Errors raised by destroy() are logged, never raised, so they
    cannot mask a result or the original error.
    """
    session = await capability.create(shared_context)
    try:
        yield session
    finally:
        try:
            await session.destroy()
            logger.debug("Summarizer session destroyed")
        except Exception as e:
            logger.warning(
                "Error cleaning up summarizer session",
                error=str(e),
                error_type=type(e).__name__,
            )


class OnDeviceProbe:
    """
    Availability checks and session scoping for the on-device capability.

    A probe built without a capability reports "no" for everything.
    """

    def __init__(self, capability: Optional[OnDeviceSummarizer]) -> None:
        self._capability = capability

    @property
    def has_capability(self) -> bool:
        return self._capability is not None

    async def availability(self) -> Availability:
        """Declared availability; absence or a failing query yields NO."""
        if self._capability is None:
            logger.debug("On-device summarizer not present")
            return Availability.NO
        try:
            state = await self._capability.availability()
        except Exception as e:
            logger.warning(
                "Error checking on-device capabilities",
                error=str(e),
                error_type=type(e).__name__,
            )
            return Availability.NO

        try:
            state = Availability(state)
        except ValueError:
            logger.warning("Unknown on-device availability state", state=str(state))
            return Availability.NO
        logger.debug("On-device capabilities", available=state.value)
        return state

    async def is_available(self) -> bool:
        """Anything other than an explicit "no" counts as available."""
        return (await self.availability()) is not Availability.NO

    def session(self, shared_context: str):
        """Scoped summarizer session (async context manager)."""
        if self._capability is None:
            raise RuntimeError("No on-device summarizer configured")
        return summarizer_session(self._capability, shared_context)


# ============================================================================
# Ollama-backed implementation
# ============================================================================


class OllamaSession(SummarizerSession):
    """One summarizer session against a local Ollama model."""

    def __init__(
        self,
        http: aiohttp.ClientSession,
        base_url: str,
        model: str,
        shared_context: str,
        max_tokens: int,
        temperature: float,
    ) -> None:
        self._http = http
        self._base_url = base_url
        self._model = model
        self._shared_context = shared_context
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._destroyed = False

    async def summarize(self, text: str) -> str:
        if self._destroyed:
            raise RuntimeError("Summarizer session already destroyed")

        payload = {
            "model": self._model,
            "system": self._shared_context,
            "prompt": text,
            "stream": False,
            "options": {
                "temperature": self._temperature,
                "num_predict": self._max_tokens,
            },
        }
        data = await _post_json(self._http, f"{self._base_url}/api/generate", payload)
        result = data.get("response")
        if not isinstance(result, str) or not result.strip():
            raise ResponseParseError(
                "Ollama /api/generate response missing response text",
                provider="on_device",
            )
        logger.debug("On-device summary generated", summary_length=len(result))
        return result.strip()

    async def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        # keep_alive=0 with no prompt asks Ollama to unload the model now
        await _post_json(
            self._http,
            f"{self._base_url}/api/generate",
            {"model": self._model, "keep_alive": 0},
        )


class OllamaSummarizer(OnDeviceSummarizer):
    """Local summarizer served by an Ollama instance."""

    def __init__(
        self,
        http: aiohttp.ClientSession,
        base_url: str = "http://localhost:11434",
        model: str = "gemma2:2b",
        await_download: bool = False,
        max_tokens: int = 1024,
        temperature: float = 0.3,
        download_timeout: Optional[float] = None,
    ) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._await_download = await_download
        self._download_timeout = download_timeout
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def model(self) -> str:
        return self._model

    async def availability(self) -> Availability:
        try:
            async with self._http.get(f"{self._base_url}/api/tags") as response:
                if response.status != 200:
                    logger.info("Ollama tags endpoint unavailable", status=response.status)
                    return Availability.NO
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.info("Ollama not reachable", base_url=self._base_url, error=str(e))
            return Availability.NO

        if _model_listed(self._model, _model_names(data)):
            return Availability.READILY
        return Availability.AFTER_DOWNLOAD

    async def create(self, shared_context: str) -> SummarizerSession:
        if self._await_download and await self.availability() is Availability.AFTER_DOWNLOAD:
            logger.info("Pulling on-device model", model=self._model)
            await _post_json(
                self._http,
                f"{self._base_url}/api/pull",
                {"model": self._model, "stream": False},
                timeout=aiohttp.ClientTimeout(total=self._download_timeout),
            )
            logger.info("On-device model pulled", model=self._model)

        return OllamaSession(
            http=self._http,
            base_url=self._base_url,
            model=self._model,
            shared_context=shared_context,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )


async def _post_json(
    http: aiohttp.ClientSession,
    url: str,
    payload: Dict[str, Any],
    timeout: Optional[aiohttp.ClientTimeout] = None,
) -> Dict[str, Any]:
    # A per-request timeout replaces the session timeout for that request only
    kwargs = {"timeout": timeout} if timeout is not None else {}
    async with http.post(url, json=payload, **kwargs) as response:
        response.raise_for_status()
        data = await response.json(content_type=None)
    if not isinstance(data, dict):
        raise ResponseParseError(f"Ollama returned non-object payload at {url}", provider="on_device")
    return data


def _model_names(data: Any) -> List[str]:
    if not isinstance(data, dict) or not isinstance(data.get("models"), list):
        return []
    names = []
    for entry in data["models"]:
        if isinstance(entry, dict):
            for key in ("name", "model"):
                if isinstance(entry.get(key), str):
                    names.append(entry[key])
    return names


def _model_listed(model: str, names: List[str]) -> bool:
    # "llama3" is listed by Ollama as "llama3:latest"
    candidates = {model}
    if ":" not in model:
        candidates.add(f"{model}:latest")
    return any(name in candidates for name in names)
