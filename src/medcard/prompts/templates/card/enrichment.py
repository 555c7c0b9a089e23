"""Card enrichment prompt templates.

The model turns a raw English encounter into the bilingual card payload and
must answer with a single JSON object.
"""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "ENRICHMENT_SYSTEM_PROMPT": """You are a bilingual (Korean/English) medical scribe \
preparing a one-page medical card that a foreign patient will hand to a Korean physician. \
You translate and structure what the patient reported. You never invent findings and you \
never make a diagnosis.""",
    "ENRICHMENT_PROMPT": """Structure the following patient-reported encounter.

Encounter:
- Chief complaint: {chief_complaint}
- Onset: {symptom_onset}
- Severity (0-10): {symptom_severity}
- Associated symptoms: {associated_symptoms}
- Concerns: {concerns}

Return a JSON object with exactly these keys:
{{
    "cc_kor": "<chief complaint in Korean medical terminology>",
    "cc_eng": "<chief complaint in plain English>",
    "hpi_kor": "<history of present illness narrative in Korean, 2-4 sentences>",
    "hpi_eng": "<the same narrative in plain English for the patient>",
    "pain_score": <numeric severity 0-10>,
    "allergies_kor": "<allergies in Korean, or "없음" if unknown>",
    "allergies_eng": "<allergies in English, or "None" if unknown>",
    "suggested_dept_kor": "<most appropriate clinic department in Korean>",
    "suggested_dept_eng": "<the same department in English>",
    "is_emergency": <true if severity is above 7 or red-flag symptoms are present, else false>
}}

Directly return the JSON object. Do not output anything else.""",
}
