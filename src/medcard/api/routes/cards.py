"""Medical card generation endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from medcard.services.card_service import CardService

router = APIRouter(tags=["cards"])


class GenerateCardRequest(BaseModel):
    user_id: str = Field(min_length=1)
    encounter_id: str = Field(min_length=1)


class GenerateCardResponse(BaseModel):
    """Signed download URL and the id of the stored card record."""

    pdf_url: str
    record_id: str


@router.post("/generate-card", response_model=GenerateCardResponse)
async def generate_card(body: GenerateCardRequest, request: Request) -> GenerateCardResponse:
    """Render the encounter's card, upload it and register the record."""
    service: CardService = request.app.state.card_service
    card = await service.generate(body.user_id, body.encounter_id)
    return GenerateCardResponse(pdf_url=card.pdf_url, record_id=card.record_id)
