"""Intake chat endpoint."""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from medcard.intake.service import IntakeService
from medcard.models import EncounterData

log = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


class ChatRequest(BaseModel):
    """One user utterance in an intake thread."""

    user_id: str = Field(min_length=1)
    thread_id: str = Field(min_length=1)
    user_input: str = Field(min_length=1)


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class ChatChoice(BaseModel):
    message: AssistantMessage


class ChatResponse(BaseModel):
    """OpenAI-shaped reply; ``encounter_id`` is set once the intake is saved."""

    choices: list[ChatChoice]
    usage: Optional[dict[str, Any]] = None
    encounter_id: Optional[str] = None
    encounter: Optional[EncounterData] = None


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(body: ChatRequest, request: Request) -> ChatResponse:
    """Advance the intake conversation by one user turn."""
    service: IntakeService = request.app.state.intake_service
    outcome = await service.handle_turn(body.user_id, body.thread_id, body.user_input)

    choices = [ChatChoice(message=AssistantMessage(content=outcome.message))]
    if outcome.is_terminal:
        log.info("Intake finalized", extra={"user_id": body.user_id, "encounter_id": outcome.encounter_id})
        return ChatResponse(choices=choices, encounter_id=outcome.encounter_id, encounter=outcome.encounter)
    return ChatResponse(choices=choices, usage=outcome.usage or None)
