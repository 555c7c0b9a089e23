"""Tests for the intake extraction protocol."""

from __future__ import annotations

import threading

import pytest

from medcard.exceptions import InvalidRequest, MalformedModelOutput, UpstreamGatewayError, UpstreamStoreError
from medcard.inference.protocols import GatewayResponse, ToolInvocation
from medcard.intake.service import IntakeService, parse_encounter_arguments
from medcard.intake.tools import SAVE_ENCOUNTER, save_encounter_tool
from medcard.persistence.memory_backend import MemoryPersistenceBackend
from medcard.stores.conversation_store import ConversationStore
from medcard.stores.record_store import RecordStore
from tests.fakes.fake_gateway import FailingGateway, FakeGateway, text_response, tool_response
from tests.fakes.fake_persistence import FlakyPersistenceBackend

_ARGS = {
    "chief_complaint": "headache",
    "symptom_onset": "2 days ago",
    "symptom_severity": "8",
    "associated_symptoms": ["fever", "cough"],
    "concerns": "meningitis",
}


def _service(gateway, conversations: ConversationStore, records: RecordStore, **kwargs) -> IntakeService:
    return IntakeService(
        gateway=gateway,
        conversations=conversations,
        records=records,
        system_prompt="SYSTEM",
        model="gpt-4o",
        **kwargs,
    )


class TestSaveEncounterTool:
    def test_schema_requires_all_five_fields(self) -> None:
        tool = save_encounter_tool()
        assert tool["function"]["name"] == SAVE_ENCOUNTER
        assert sorted(tool["function"]["parameters"]["required"]) == sorted(_ARGS)
        assert tool["function"]["parameters"]["properties"]["associated_symptoms"]["type"] == "array"


class TestParseEncounterArguments:
    def test_valid_arguments(self) -> None:
        data = parse_encounter_arguments('{"chief_complaint": "a", "symptom_onset": "b", '
                                         '"symptom_severity": "5", "associated_symptoms": [], "concerns": "c"}')
        assert data.associated_symptoms == []

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedModelOutput):
            parse_encounter_arguments("{not json")

    def test_missing_field(self) -> None:
        with pytest.raises(MalformedModelOutput):
            parse_encounter_arguments('{"chief_complaint": "headache"}')

    def test_non_object(self) -> None:
        with pytest.raises(MalformedModelOutput):
            parse_encounter_arguments('"headache"')


class TestHandleTurnValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "user_id, thread_id, user_input",
        [("", "t1", "hi"), ("u1", "", "hi"), ("u1", "t1", "")],
    )
    async def test_missing_fields_rejected_without_side_effects(
        self, conversations, records, backend, user_id, thread_id, user_input
    ) -> None:
        gateway = FakeGateway()
        service = _service(gateway, conversations, records, record_turns=True)
        with pytest.raises(InvalidRequest):
            await service.handle_turn(user_id, thread_id, user_input)
        assert gateway.calls == []
        assert backend.list_keys() == []


class TestHandleTurnText:
    @pytest.mark.asyncio
    async def test_text_reply_is_non_terminal(self, conversations, records, backend) -> None:
        gateway = FakeGateway(text_response("When did it start?", total_tokens=12))
        outcome = await _service(gateway, conversations, records).handle_turn("u1", "t1", "I have a headache")

        assert outcome.is_terminal is False
        assert outcome.message == "When did it start?"
        assert outcome.encounter_id is None
        assert outcome.usage == {"total_tokens": 12}
        assert backend.list_keys("encounters/") == []

    @pytest.mark.asyncio
    async def test_request_shape(self, conversations, records) -> None:
        gateway = FakeGateway(text_response("ok"))
        await _service(gateway, conversations, records, temperature=0.2).handle_turn("u1", "t1", "hello")

        call = gateway.calls[0]
        assert call["messages"][0] == {"role": "system", "content": "SYSTEM"}
        assert call["messages"][-1] == {"role": "user", "content": "hello"}
        assert call["tool_choice"] == "auto"
        assert call["tools"][0]["function"]["name"] == SAVE_ENCOUNTER
        assert call["params"] == {"temperature": 0.2}

    @pytest.mark.asyncio
    async def test_history_between_system_and_user(self, conversations, records) -> None:
        conversations.append("u1", "t1", "user", "I have a headache")
        conversations.append("u1", "t1", "assistant", "When did it start?")
        gateway = FakeGateway(text_response("How bad is it?"))

        await _service(gateway, conversations, records).handle_turn("u1", "t1", "2 days ago")

        roles = [m["role"] for m in gateway.calls[0]["messages"]]
        assert roles == ["system", "user", "assistant", "user"]
        assert gateway.calls[0]["messages"][1]["content"] == "I have a headache"

    @pytest.mark.asyncio
    async def test_history_limited_to_most_recent(self, conversations, records) -> None:
        for i in range(5):
            conversations.append("u1", "t1", "user", f"turn {i}")
        gateway = FakeGateway(text_response("ok"))

        await _service(gateway, conversations, records, history_limit=2).handle_turn("u1", "t1", "next")

        contents = [m["content"] for m in gateway.calls[0]["messages"][1:-1]]
        assert contents == ["turn 3", "turn 4"]

    @pytest.mark.asyncio
    async def test_empty_reply_becomes_empty_message(self, conversations, records) -> None:
        gateway = FakeGateway(GatewayResponse(text=None))
        outcome = await _service(gateway, conversations, records).handle_turn("u1", "t1", "hi")
        assert outcome.message == ""
        assert outcome.is_terminal is False

    @pytest.mark.asyncio
    async def test_unknown_tool_is_ignored(self, conversations, records, backend) -> None:
        response = GatewayResponse(text="Tell me more.", tool_calls=[ToolInvocation(name="lookup", arguments="{}")])
        outcome = await _service(FakeGateway(response), conversations, records).handle_turn("u1", "t1", "hi")
        assert outcome.message == "Tell me more."
        assert backend.list_keys("encounters/") == []


class TestHandleTurnFinalize:
    @pytest.mark.asyncio
    async def test_tool_call_persists_encounter(self, conversations, records) -> None:
        gateway = FakeGateway(tool_response(SAVE_ENCOUNTER, _ARGS))
        outcome = await _service(gateway, conversations, records).handle_turn("u1", "t1", "That's all")

        assert outcome.is_terminal is True
        assert outcome.message == "Your symptom information has been saved successfully."
        stored = records.get_encounter(outcome.encounter_id)
        assert stored.user_id == "u1"
        assert stored.thread_id == "t1"
        assert stored.data.associated_symptoms == ["fever", "cough"]
        assert outcome.encounter == stored.data

    @pytest.mark.asyncio
    async def test_only_first_save_call_honoured(self, conversations, records, backend) -> None:
        second = ToolInvocation(name=SAVE_ENCOUNTER, arguments='{"chief_complaint": "other"}', call_id="call_2")
        gateway = FakeGateway(tool_response(SAVE_ENCOUNTER, _ARGS, second))

        outcome = await _service(gateway, conversations, records).handle_turn("u1", "t1", "done")

        assert len(backend.list_keys("encounters/")) == 1
        assert outcome.encounter.chief_complaint == "headache"

    @pytest.mark.asyncio
    async def test_tool_call_wins_over_text(self, conversations, records) -> None:
        response = tool_response(SAVE_ENCOUNTER, _ARGS)
        response.text = "Saving now."
        outcome = await _service(FakeGateway(response), conversations, records).handle_turn("u1", "t1", "done")
        assert outcome.is_terminal is True

    @pytest.mark.asyncio
    async def test_malformed_arguments_propagate(self, conversations, records, backend) -> None:
        gateway = FakeGateway(tool_response(SAVE_ENCOUNTER, '{"chief_complaint": '))
        with pytest.raises(MalformedModelOutput):
            await _service(gateway, conversations, records).handle_turn("u1", "t1", "done")
        assert backend.list_keys("encounters/") == []

    @pytest.mark.asyncio
    async def test_custom_confirmation_message(self, conversations, records) -> None:
        gateway = FakeGateway(tool_response(SAVE_ENCOUNTER, _ARGS))
        service = _service(gateway, conversations, records, confirmation_message="Saved.")
        outcome = await service.handle_turn("u1", "t1", "done")
        assert outcome.message == "Saved."


class TestHandleTurnFailures:
    @pytest.mark.asyncio
    async def test_gateway_failure_propagates(self, conversations, records) -> None:
        with pytest.raises(UpstreamGatewayError):
            await _service(FailingGateway(), conversations, records).handle_turn("u1", "t1", "hi")

    @pytest.mark.asyncio
    async def test_history_failure_skips_model_call(self, records) -> None:
        gateway = FakeGateway()
        conversations = ConversationStore(FlakyPersistenceBackend(fail_reads=True))
        with pytest.raises(UpstreamStoreError):
            await _service(gateway, conversations, records).handle_turn("u1", "t1", "hi")
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_encounter_insert_failure(self, conversations) -> None:
        records = RecordStore(FlakyPersistenceBackend(fail_writes=True))
        gateway = FakeGateway(tool_response(SAVE_ENCOUNTER, _ARGS))
        with pytest.raises(UpstreamStoreError):
            await _service(gateway, conversations, records).handle_turn("u1", "t1", "done")


class TestTurnRecording:
    @pytest.mark.asyncio
    async def test_turns_not_recorded_by_default(self, conversations, records, backend) -> None:
        await _service(FakeGateway(text_response("ok")), conversations, records).handle_turn("u1", "t1", "hi")
        assert backend.list_keys("chat/") == []

    @pytest.mark.asyncio
    async def test_turns_recorded_when_enabled(self, conversations, records) -> None:
        service = _service(FakeGateway(text_response("When did it start?")), conversations, records, record_turns=True)
        await service.handle_turn("u1", "t1", "I have a headache")

        turns = conversations.recent("u1", "t1")
        assert [(t.role, t.content) for t in turns] == [
            ("user", "I have a headache"),
            ("assistant", "When did it start?"),
        ]

    @pytest.mark.asyncio
    async def test_failed_turn_not_recorded(self, conversations, records, backend) -> None:
        service = _service(FailingGateway(), conversations, records, record_turns=True)
        with pytest.raises(UpstreamGatewayError):
            await service.handle_turn("u1", "t1", "hi")
        assert backend.list_keys("chat/") == []


class _ThreadRecordingBackend(MemoryPersistenceBackend):
    """Notes which thread each store call lands on."""

    def __init__(self) -> None:
        super().__init__()
        self.threads: set[int] = set()

    def save(self, key: str, data: str) -> None:
        self.threads.add(threading.get_ident())
        super().save(key, data)

    def list_keys(self, prefix: str = "") -> list[str]:
        self.threads.add(threading.get_ident())
        return super().list_keys(prefix)


class TestStoreCallsOffEventLoop:
    @pytest.mark.asyncio
    async def test_store_io_runs_in_worker_threads(self) -> None:
        backend = _ThreadRecordingBackend()
        service = _service(
            FakeGateway(tool_response(SAVE_ENCOUNTER, _ARGS)),
            ConversationStore(backend),
            RecordStore(backend),
            record_turns=True,
        )

        outcome = await service.handle_turn("u1", "t1", "done")

        assert outcome.is_terminal
        assert backend.threads
        assert threading.get_ident() not in backend.threads
