"""Intake extraction protocol.

Each user utterance either continues the interview (model replies with
text) or finalizes it (model invokes ``save_encounter``), in which case
exactly one ``EncounterRecord`` is persisted.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from medcard.exceptions import InvalidRequest, MalformedModelOutput
from medcard.inference.protocols import IInferenceBackend, TextReply, ToolInvocation
from medcard.intake.tools import SAVE_ENCOUNTER, save_encounter_tool
from medcard.models import EncounterData
from medcard.stores.conversation_store import ConversationStore
from medcard.stores.record_store import RecordStore

log = logging.getLogger(__name__)


@dataclass
class IntakeOutcome:
    """Result of one intake turn.

    Terminal outcomes carry ``encounter_id`` and ``encounter``; non-terminal
    ones carry the model's text and usage.
    """

    message: str
    encounter_id: Optional[str] = None
    encounter: Optional[EncounterData] = None
    usage: dict[str, int] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.encounter_id is not None


def parse_encounter_arguments(arguments: str) -> EncounterData:
    """Parse ``save_encounter`` arguments; raises ``MalformedModelOutput``."""
    try:
        payload: Any = json.loads(arguments)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedModelOutput(f"save_encounter arguments are not JSON: {e}", raw_response=arguments) from e
    if not isinstance(payload, dict):
        raise MalformedModelOutput("save_encounter arguments are not a JSON object", raw_response=arguments)
    try:
        return EncounterData.model_validate(payload)
    except ValidationError as e:
        raise MalformedModelOutput(f"save_encounter arguments do not match schema: {e}", raw_response=arguments) from e


class IntakeService:
    """Runs the intake conversation against the gateway and stores."""

    def __init__(
        self,
        *,
        gateway: IInferenceBackend,
        conversations: ConversationStore,
        records: RecordStore,
        system_prompt: str,
        model: str,
        history_limit: int = 20,
        confirmation_message: str = "Your symptom information has been saved successfully.",
        record_turns: bool = False,
        **params: Any,
    ) -> None:
        self._gateway = gateway
        self._conversations = conversations
        self._records = records
        self._system_prompt = system_prompt
        self._model = model
        self._history_limit = history_limit
        self._confirmation_message = confirmation_message
        self._record_turns = record_turns
        self._params = params

    async def handle_turn(self, user_id: str, thread_id: str, user_input: str) -> IntakeOutcome:
        if not user_id or not thread_id or not user_input:
            raise InvalidRequest("user_id, thread_id and user_input are required")

        history = await asyncio.to_thread(self._conversations.recent, user_id, thread_id, self._history_limit)
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": self._system_prompt},
            *(turn.as_message() for turn in history),
            {"role": "user", "content": user_input},
        ]

        response = await self._gateway.complete(
            messages,
            self._model,
            tools=[save_encounter_tool()],
            tool_choice="auto",
            **self._params,
        )

        invocations = [r for r in response.replies() if isinstance(r, ToolInvocation)]
        save_calls = [c for c in invocations if c.name == SAVE_ENCOUNTER]
        if save_calls:
            outcome = await asyncio.to_thread(
                self._finalize, user_id, thread_id, save_calls[0], ignored=len(invocations) - 1
            )
        else:
            if invocations:
                log.warning(
                    "Ignoring unknown tool invocations: %s",
                    [c.name for c in invocations],
                    extra={"user_id": user_id, "thread_id": thread_id},
                )
            texts = [r.content for r in response.replies() if isinstance(r, TextReply)]
            outcome = IntakeOutcome(message=texts[0] if texts else "", usage=response.usage)

        if self._record_turns:
            await asyncio.to_thread(self._record_exchange, user_id, thread_id, user_input, outcome.message)
        return outcome

    def _record_exchange(self, user_id: str, thread_id: str, user_input: str, reply: str) -> None:
        self._conversations.append(user_id, thread_id, "user", user_input)
        self._conversations.append(user_id, thread_id, "assistant", reply)

    def _finalize(self, user_id: str, thread_id: str, call: ToolInvocation, *, ignored: int) -> IntakeOutcome:
        if ignored:
            log.warning(
                "Honouring first save_encounter call, ignoring %d other invocation(s)",
                ignored,
                extra={"user_id": user_id, "thread_id": thread_id},
            )
        data = parse_encounter_arguments(call.arguments)
        record = self._records.insert_encounter(user_id, thread_id, data)
        return IntakeOutcome(
            message=self._confirmation_message,
            encounter_id=record.id,
            encounter=record.data,
        )
