"""Tests for the POST /chat endpoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from medcard.api.app import configure_app, wire_services
from medcard.core.config import AppSettings, IntakeConfig
from medcard.intake.tools import SAVE_ENCOUNTER
from medcard.persistence.memory_backend import MemoryPersistenceBackend
from medcard.stores.blob_store import MemoryBlobStore
from tests.fakes.fake_gateway import FailingGateway, FakeGateway, text_response, tool_response

_ARGS = {
    "chief_complaint": "headache",
    "symptom_onset": "2 days ago",
    "symptom_severity": "8",
    "associated_symptoms": ["fever", "cough"],
    "concerns": "meningitis",
}


def _build_app(gateway, settings: AppSettings | None = None) -> tuple[FastAPI, MemoryPersistenceBackend]:
    """Minimal app wired to in-memory stores and a scripted gateway."""
    backend = MemoryPersistenceBackend()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        wire_services(
            app,
            settings or AppSettings(),
            gateway=gateway,
            persistence=backend,
            blob_store=MemoryBlobStore(),
        )
        yield

    return configure_app(FastAPI(lifespan=lifespan)), backend


def _payload(**overrides: str) -> dict[str, str]:
    return {"user_id": "u1", "thread_id": "t1", "user_input": "I have a headache", **overrides}


class TestChatNonTerminal:
    def test_text_reply_shape(self) -> None:
        app, backend = _build_app(FakeGateway(text_response("When did it start?", total_tokens=30)))
        with TestClient(app) as client:
            resp = client.post("/chat", json=_payload())

        assert resp.status_code == 200
        body = resp.json()
        assert body["choices"] == [{"message": {"role": "assistant", "content": "When did it start?"}}]
        assert body["usage"] == {"total_tokens": 30}
        assert "encounter_id" not in body
        assert backend.list_keys("encounters/") == []

    def test_usage_omitted_when_empty(self) -> None:
        app, _ = _build_app(FakeGateway(text_response("ok")))
        with TestClient(app) as client:
            body = client.post("/chat", json=_payload()).json()
        assert "usage" not in body


class TestChatTerminal:
    def test_tool_call_returns_encounter(self) -> None:
        app, backend = _build_app(FakeGateway(tool_response(SAVE_ENCOUNTER, _ARGS)))
        with TestClient(app) as client:
            resp = client.post("/chat", json=_payload(user_input="That's everything"))

        assert resp.status_code == 200
        body = resp.json()
        assert body["encounter"] == _ARGS
        assert body["choices"][0]["message"]["content"] == "Your symptom information has been saved successfully."
        assert backend.list_keys("encounters/") == [f"encounters/{body['encounter_id']}"]

    def test_recorded_turns_feed_next_request(self) -> None:
        gateway = FakeGateway(text_response("When did it start?"), text_response("How bad is it?"))
        settings = AppSettings(intake=IntakeConfig(record_turns=True))
        app, _ = _build_app(gateway, settings)
        with TestClient(app) as client:
            client.post("/chat", json=_payload())
            client.post("/chat", json=_payload(user_input="2 days ago"))

        roles = [m["role"] for m in gateway.calls[1]["messages"]]
        assert roles == ["system", "user", "assistant", "user"]


class TestChatValidation:
    @pytest.mark.parametrize("field", ["user_id", "thread_id", "user_input"])
    def test_missing_field_is_400(self, field: str) -> None:
        gateway = FakeGateway()
        app, _ = _build_app(gateway)
        payload = _payload()
        del payload[field]
        with TestClient(app) as client:
            resp = client.post("/chat", json=payload)

        assert resp.status_code == 400
        assert resp.json()["type"] == "invalid_request"
        assert field in resp.json()["error"]
        assert gateway.calls == []

    def test_empty_field_is_400(self) -> None:
        app, _ = _build_app(FakeGateway())
        with TestClient(app) as client:
            resp = client.post("/chat", json=_payload(user_input=""))
        assert resp.status_code == 400


class TestChatUpstreamErrors:
    def test_gateway_failure_is_500(self) -> None:
        app, _ = _build_app(FailingGateway())
        with TestClient(app) as client:
            resp = client.post("/chat", json=_payload())
        assert resp.status_code == 500
        assert resp.json()["type"] == "gateway_error"

    def test_malformed_tool_arguments_is_500(self) -> None:
        app, backend = _build_app(FakeGateway(tool_response(SAVE_ENCOUNTER, "{broken")))
        with TestClient(app) as client:
            resp = client.post("/chat", json=_payload())
        assert resp.status_code == 500
        assert resp.json()["type"] == "malformed_model_output"
        assert backend.list_keys("encounters/") == []


class TestHealth:
    def test_health_and_ready(self) -> None:
        app, _ = _build_app(FakeGateway())
        with TestClient(app) as client:
            assert client.get("/health").json() == {"status": "ok"}
            assert client.get("/ready").json() == {"status": "ready"}

    def test_not_ready_before_wiring(self) -> None:
        app = configure_app(FastAPI())
        with TestClient(app) as client:
            assert client.get("/ready").status_code == 503
