"""Nested pydantic-settings configuration for the application.

Each group reads its own ``MEDCARD_<GROUP>_*`` env vars::

    export MEDCARD_LLM_API_KEY=sk-...
    export MEDCARD_STORAGE_BUCKET=medical-records
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMConfig(BaseSettings):
    """Language model gateway configuration.

    Env vars use ``MEDCARD_LLM_`` prefix::

        export MEDCARD_LLM_PROVIDER=openai
        export MEDCARD_LLM_CHAT_MODEL=gpt-4o
    """

    model_config = {"env_prefix": "MEDCARD_LLM_"}

    provider: Literal["openai", "anthropic", "ollama", "litellm", "bedrock"] = "openai"
    api_key: str = "no-key"
    base_url: Optional[str] = None
    chat_model: str = "gpt-4o"
    enrichment_model: str = "gpt-4o"
    enrichment_enabled: bool = True
    temperature: Optional[float] = None
    timeout: float = Field(default=60.0, gt=0.0)


class IntakeConfig(BaseSettings):
    """Intake conversation configuration.

    Env vars use ``MEDCARD_INTAKE_`` prefix.
    """

    model_config = {"env_prefix": "MEDCARD_INTAKE_"}

    history_limit: int = Field(default=20, ge=0)
    system_prompt_path: Optional[Path] = None
    record_turns: bool = False
    confirmation_message: str = "Your symptom information has been saved successfully."


class PersistenceConfig(BaseSettings):
    """Record and conversation persistence configuration.

    Env vars use ``MEDCARD_PERSISTENCE_`` prefix.
    """

    model_config = {"env_prefix": "MEDCARD_PERSISTENCE_"}

    backend: Literal["file", "s3", "memory"] = "file"
    store_path: Path = Path("./data")
    s3_bucket: str = ""
    s3_prefix: str = "records/"
    aws_region: str = "ap-northeast-2"


class StorageConfig(BaseSettings):
    """Blob storage for rendered medical cards.

    Env vars use ``MEDCARD_STORAGE_`` prefix.
    """

    model_config = {"env_prefix": "MEDCARD_STORAGE_"}

    backend: Literal["s3", "memory"] = "s3"
    bucket: str = "medical-records"
    aws_region: str = "ap-northeast-2"
    signed_url_ttl_seconds: int = Field(default=3600, gt=0)


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Env vars use ``MEDCARD_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "MEDCARD_OBSERVABILITY_"}

    log_level: str = "INFO"


class PDFFormattingConfig(BaseSettings):
    """Medical card PDF formatting configuration.

    Env vars use ``MEDCARD_PDF_`` prefix::

        export MEDCARD_PDF_PAGE_SIZE=letter
        export MEDCARD_PDF_CJK_FONT_PATH=/fonts/NanumGothic.ttf
    """

    model_config = {"env_prefix": "MEDCARD_PDF_"}

    page_size: Literal["letter", "a4"] = "a4"
    margin_inches: float = Field(default=0.6, gt=0.0, le=3.0)
    font_family: str = "Helvetica"
    cjk_font_name: str = "HYGothic-Medium"
    cjk_font_path: Optional[Path] = None
    body_font_size: int = Field(default=10, ge=6, le=72)
    heading_font_size: int = Field(default=13, ge=6, le=72)
    brand_title: str = "MediCard"


class APIConfig(BaseSettings):
    """HTTP server configuration.

    Env vars use ``MEDCARD_API_`` prefix.
    """

    model_config = {"env_prefix": "MEDCARD_API_"}

    title: str = "medcard"
    description: str = "Symptom intake chat and bilingual medical card generation"
    host: str = "0.0.0.0"
    port: int = 8080


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    llm: LLMConfig = LLMConfig()
    intake: IntakeConfig = IntakeConfig()
    persistence: PersistenceConfig = PersistenceConfig()
    storage: StorageConfig = StorageConfig()
    observability: ObservabilityConfig = ObservabilityConfig()
    pdf: PDFFormattingConfig = PDFFormattingConfig()
    api: APIConfig = APIConfig()
