from __future__ import annotations

import json

import httpx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from codesync.api.dependencies import get_http_client
from codesync.api.restful.assistant import build_prompt
from codesync.api.restful.assistant import router as assistant_router
from codesync.core.settings import Settings, get_settings


def create_app(handler, api_key: str | None = "gemini-key") -> FastAPI:
    app = FastAPI()
    app.include_router(assistant_router)

    async def _client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            yield client

    settings = Settings(gemini_api_key=api_key, gemini_model="test-model")
    app.dependency_overrides[get_http_client] = _client
    app.dependency_overrides[get_settings] = lambda: settings
    return app


def test_build_prompt_wraps_code_in_fence():
    assert build_prompt("Explain", "x = 1") == "Explain:\n\n```\nx = 1\n```"


def test_ask_ai_returns_candidate_text():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"candidates": [{"content": {"parts": [{"text": "Looks "}, {"text": "fine."}]}}]},
        )

    client = TestClient(create_app(handler))
    resp = client.post("/ask-ai", json={"code": "x = 1", "prompt": "Review"})

    assert resp.status_code == 200
    assert resp.json() == {"response": "Looks fine."}
    assert seen[0].url.path.endswith("/models/test-model:generateContent")
    assert seen[0].headers["x-goog-api-key"] == "gemini-key"
    body = json.loads(seen[0].content)
    assert body["contents"][0]["parts"][0]["text"] == build_prompt("Review", "x = 1")


def test_ask_ai_requires_code_and_prompt():
    client = TestClient(create_app(lambda request: httpx.Response(500)))
    resp = client.post("/ask-ai", json={"code": "x = 1"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Code and a prompt are required."}


def test_ask_ai_without_api_key_fails_cleanly():
    client = TestClient(create_app(lambda request: httpx.Response(200, json={}), api_key=None))
    resp = client.post("/ask-ai", json={"code": "x", "prompt": "y"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to get a response from the AI assistant."}


def test_ask_ai_malformed_upstream_body_fails_cleanly():
    client = TestClient(create_app(lambda request: httpx.Response(200, json={"candidates": []})))
    resp = client.post("/ask-ai", json={"code": "x", "prompt": "y"})
    assert resp.status_code == 500
