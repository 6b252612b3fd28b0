"""Shared fixtures: valid keys, credential stores, a fake provider backend."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from visua11y.config import Config
from visua11y.credentials import InMemoryCredentialStore

OPENAI_KEY = "sk-" + "a" * 50
GEMINI_KEY = "AIza" + "b" * 35


@dataclass
class RecordedRequest:
    """One request seen by the fake backend."""

    route: str
    path: str
    query: Dict[str, str]
    headers: Dict[str, str]
    body: Any


class FakeBackend:
    """
    Stand-in for the OpenAI, Gemini and Ollama HTTP APIs.

    Routes:
        openai          POST /v1/chat/completions
        gemini          POST /v1beta/{model}
        ollama_tags     GET  /api/tags
        ollama_generate POST /api/generate
        ollama_pull     POST /api/pull

    Unconfigured routes answer 404 with an error body.
    """

    def __init__(self) -> None:
        self.requests: List[RecordedRequest] = []
        self._responses: Dict[str, Tuple[int, Any]] = {}
        self._delays: Dict[str, float] = {}

    def respond(self, route: str, status: int = 200, body: Any = None) -> None:
        self._responses[route] = (status, body if body is not None else {})

    def delay(self, route: str, seconds: float) -> None:
        self._delays[route] = seconds

    def calls(self, route: str) -> List[RecordedRequest]:
        return [r for r in self.requests if r.route == route]

    async def _handle(self, route: str, request: web.Request) -> web.Response:
        raw = await request.text()
        try:
            body = await request.json() if raw else None
        except ValueError:
            body = raw
        self.requests.append(
            RecordedRequest(
                route=route,
                path=request.path,
                query=dict(request.query),
                headers=dict(request.headers),
                body=body,
            )
        )

        if route in self._delays:
            await asyncio.sleep(self._delays[route])

        status, payload = self._responses.get(
            route, (404, {"error": {"message": f"route {route} not configured"}})
        )
        if isinstance(payload, bytes):
            return web.Response(status=status, body=payload, content_type="application/json", charset="utf-8")
        if isinstance(payload, str):
            return web.Response(status=status, text=payload, content_type="application/json")
        return web.json_response(payload, status=status)

    def _route(self, route: str):
        async def handler(request: web.Request) -> web.Response:
            return await self._handle(route, request)
        return handler

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/v1/chat/completions", self._route("openai"))
        app.router.add_post("/v1beta/{model:.+}", self._route("gemini"))
        app.router.add_get("/api/tags", self._route("ollama_tags"))
        app.router.add_post("/api/generate", self._route("ollama_generate"))
        app.router.add_post("/api/pull", self._route("ollama_pull"))
        return app


@asynccontextmanager
async def serve(backend: FakeBackend):
    """Run the fake backend on a local port for the duration of the block."""
    async with TestServer(backend.app()) as server:
        yield server


def settings_for(server: Optional[TestServer], **overrides) -> Config:
    """Config pointing every provider at the fake backend."""
    values: Dict[str, Any] = {
        "ON_DEVICE_ENABLED": False,
        "PROVIDER_TIMEOUT_SEC": 5.0,
        "CREDENTIAL_STORE_PATH": "/nonexistent/credentials.json",
    }
    if server is not None:
        values.update(
            OPENAI_API_URL=str(server.make_url("/v1/chat/completions")),
            GEMINI_API_BASE=str(server.make_url("/v1beta")),
            OLLAMA_BASE_URL=str(server.make_url("/")).rstrip("/"),
        )
    values.update(overrides)
    return Config(**values)


def openai_reply(text: str) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def gemini_reply(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def empty_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def both_keys_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore({"openaiApiKey": OPENAI_KEY, "geminiApiKey": GEMINI_KEY})
