from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # make it absolute so reload/CWD doesn't break it
        env_file=Path(__file__).resolve().parents[1] / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="none",
    )

    # Application
    app_name: str = Field(default="Chemistry Figure Pipeline", validation_alias="APP_NAME")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        validation_alias="APP_ENV",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_dir: Path | None = Field(
        default=Path(__file__).resolve().parents[1] / "logs",
        validation_alias="LOG_DIR",
        description="Directory for rotating log files; 'none' logs to stdout only",
    )

    # API
    api_host: str = Field(default="127.0.0.1", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")

    # LLM
    llm_provider: Literal["ollama", "openai", "gemini"] = Field(
        default="ollama",
        validation_alias="LLM_PROVIDER",
    )
    llm_model_name: str = Field(
        default="gemma3:27b",
        validation_alias="LLM_MODEL_NAME",
        description="Model for whole-page transcription and figure detection.",
    )
    llm_chemistry_model_name: str | None = Field(
        default=None,
        validation_alias="LLM_CHEMISTRY_MODEL_NAME",
        description="Model for structure reading. Falls back to LLM_MODEL_NAME when unset.",
    )
    llm_base_url: str = Field(
        default="http://localhost:11434",
        validation_alias="LLM_BASE_URL",
        description="Ollama base URL. Ignored for cloud providers.",
    )
    llm_api_key: str | None = Field(
        default=None,
        validation_alias="LLM_API_KEY",
        description="API key for cloud LLM providers (OpenAI, Gemini). Not needed for Ollama.",
    )
    llm_temperature: float = Field(
        default=0.1,
        validation_alias="LLM_TEMPERATURE",
        description="Low temperature for deterministic transcriptions.",
    )

    # Prompt management
    prompts_dir: Path = Field(
        default=Path(__file__).resolve().parent / "llm" / "default_prompts",
        validation_alias="PROMPTS_DIR",
    )

    # Timeouts (seconds); expiry is handled as a failed request
    page_extraction_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        validation_alias="PAGE_EXTRACTION_TIMEOUT_SECONDS",
    )
    chemistry_extraction_timeout_seconds: float = Field(
        default=180.0,
        gt=0,
        validation_alias="CHEMISTRY_EXTRACTION_TIMEOUT_SECONDS",
    )

    @property
    def chemistry_model_name(self) -> str:
        return self.llm_chemistry_model_name or self.llm_model_name


# Global settings instance
settings = Settings()
