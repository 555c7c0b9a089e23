"""Card enrichment: raw encounter -> bilingual ``StructuredCardData``.

One JSON-mode gateway call; anything that does not parse into the complete
field set falls back to :func:`fallback_card`, which never fails.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from medcard.cards.fields import is_severe, join_symptoms, synthesize_narrative
from medcard.exceptions import MalformedModelOutput, UpstreamGatewayError
from medcard.inference.protocols import IInferenceBackend
from medcard.models import STRUCTURED_CARD_FIELDS, EncounterData, EnrichedCard, StructuredCardData
from medcard.prompts import get_prompt

log = logging.getLogger(__name__)

UNKNOWN_ALLERGIES_KOR = "정보 없음"
UNKNOWN_ALLERGIES_ENG = "Unknown"
DEFAULT_DEPT_KOR = "내과"
DEFAULT_DEPT_ENG = "Internal Medicine"


def fallback_card(encounter: EncounterData) -> StructuredCardData:
    """Deterministic local synthesis from the raw fields (no translation)."""
    narrative = synthesize_narrative(
        chief_complaint=encounter.chief_complaint,
        symptom_onset=encounter.symptom_onset,
        symptom_severity=encounter.symptom_severity,
        associated_symptoms=encounter.associated_symptoms,
        concerns=encounter.concerns,
    )
    return StructuredCardData(
        cc_kor=encounter.chief_complaint or "N/A",
        cc_eng=encounter.chief_complaint or "N/A",
        hpi_kor=narrative,
        hpi_eng=narrative,
        pain_score=encounter.symptom_severity or "N/A",
        allergies_kor=UNKNOWN_ALLERGIES_KOR,
        allergies_eng=UNKNOWN_ALLERGIES_ENG,
        suggested_dept_kor=DEFAULT_DEPT_KOR,
        suggested_dept_eng=DEFAULT_DEPT_ENG,
        is_emergency=is_severe(encounter.symptom_severity),
    )


def parse_structured_card(content: str) -> StructuredCardData:
    """Strictly parse JSON-mode output into a complete ``StructuredCardData``.

    Raises:
        MalformedModelOutput: Not a JSON object, a key is missing or null,
            or a value has the wrong type.
    """
    try:
        payload: Any = json.loads(content)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedModelOutput(f"Enrichment output is not JSON: {e}", raw_response=content or "") from e
    if not isinstance(payload, dict):
        raise MalformedModelOutput("Enrichment output is not a JSON object", raw_response=content)

    missing = sorted(f for f in STRUCTURED_CARD_FIELDS if payload.get(f) is None)
    if missing:
        raise MalformedModelOutput(f"Enrichment output missing fields: {missing}", raw_response=content)
    if not isinstance(payload["is_emergency"], bool):
        raise MalformedModelOutput("is_emergency must be a boolean", raw_response=content)

    try:
        return StructuredCardData.model_validate({f: payload[f] for f in STRUCTURED_CARD_FIELDS})
    except ValidationError as e:
        raise MalformedModelOutput(f"Enrichment output has invalid values: {e}", raw_response=content) from e


class CardEnricher:
    """Upgrades a raw encounter into an ``EnrichedCard``."""

    def __init__(self, gateway: IInferenceBackend, model: str, **params: Any) -> None:
        self._gateway = gateway
        self._model = model
        self._params = params

    def _messages(self, encounter: EncounterData) -> list[dict[str, str]]:
        prompt = get_prompt("card", "enrichment", "ENRICHMENT_PROMPT").format(
            chief_complaint=encounter.chief_complaint,
            symptom_onset=encounter.symptom_onset,
            symptom_severity=encounter.symptom_severity,
            associated_symptoms=join_symptoms(encounter.associated_symptoms),
            concerns=encounter.concerns,
        )
        return [
            {"role": "system", "content": get_prompt("card", "enrichment", "ENRICHMENT_SYSTEM_PROMPT")},
            {"role": "user", "content": prompt},
        ]

    async def enrich(self, encounter: EncounterData) -> EnrichedCard:
        try:
            response = await self._gateway.complete(
                self._messages(encounter),
                self._model,
                response_format={"type": "json_object"},
                **self._params,
            )
            data = parse_structured_card(response.text or "")
        except MalformedModelOutput as e:
            log.warning(
                "Enrichment output unusable, using local synthesis: %s",
                e,
                extra={"response_preview": e.raw_response[:200]},
            )
            data = fallback_card(encounter)
        except UpstreamGatewayError as e:
            log.warning("Enrichment call failed, using local synthesis: %s", e)
            data = fallback_card(encounter)
        return EnrichedCard(data=data)
