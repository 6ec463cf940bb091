from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from application.ports.llm_client import LLMClientPort
    from application.ports.prompt_repository import PromptRepositoryPort
    from infrastructure.config import Settings

log = structlog.get_logger(__name__)


def create_llm_client(settings: Settings, model_name: str | None = None) -> LLMClientPort:
    """Instantiate the LLM adapter selected by LLM_PROVIDER in config.

    ``model_name`` overrides LLM_MODEL_NAME, so page extraction and structure
    reading can run on different models of the same provider.
    """
    provider = settings.llm_provider
    model = model_name or settings.llm_model_name

    if provider == "ollama":
        from infrastructure.llm.adapters.ollama_client import OllamaLLMClient  # noqa: PLC0415

        log.info("llm.factory", provider="ollama", model=model)
        return OllamaLLMClient(
            model_name=model,
            base_url=settings.llm_base_url,
            temperature=settings.llm_temperature,
        )

    if provider in ("openai", "gemini") and not settings.llm_api_key:
        msg = f"LLM_API_KEY must be set when LLM_PROVIDER={provider}"
        raise ValueError(msg)

    if provider == "openai":
        from infrastructure.llm.adapters.openai_client import OpenAILLMClient  # noqa: PLC0415

        log.info("llm.factory", provider="openai", model=model)
        return OpenAILLMClient(
            model_name=model,
            api_key=settings.llm_api_key,
            temperature=settings.llm_temperature,
        )

    if provider == "gemini":
        from infrastructure.llm.adapters.gemini_client import GeminiLLMClient  # noqa: PLC0415

        log.info("llm.factory", provider="gemini", model=model)
        return GeminiLLMClient(
            model_name=model,
            api_key=settings.llm_api_key,
            temperature=settings.llm_temperature,
        )

    msg = f"Unsupported LLM_PROVIDER: {provider!r}. Valid options: ollama, openai, gemini"
    raise ValueError(msg)


def create_prompt_repository(settings: Settings) -> PromptRepositoryPort:
    """Instantiate the YAML prompt repository rooted at PROMPTS_DIR."""
    from infrastructure.llm.prompt_repositories.yaml_prompt_repository import (  # noqa: PLC0415
        YamlPromptRepository,
    )

    log.info("prompt_repo.factory", type="yaml", prompts_dir=str(settings.prompts_dir))
    return YamlPromptRepository(prompts_dir=settings.prompts_dir)
