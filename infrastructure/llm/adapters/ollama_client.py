from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from infrastructure.llm.adapters.messages import build_image_messages, response_text

if TYPE_CHECKING:
    from langchain_ollama import ChatOllama

log = structlog.get_logger(__name__)


class OllamaLLMClient:
    """LLMClientPort adapter backed by a local Ollama server via LangChain.

    Needs a vision-capable model (gemma3, llava, qwen2.5vl, ...). Lazy-loads
    langchain_ollama so the API can start before the model server is reachable.
    """

    def __init__(
        self,
        model_name: str = "gemma3:27b",
        base_url: str = "http://localhost:11434",
        temperature: float = 0.1,
    ) -> None:
        self._model_name = model_name
        self._base_url = base_url
        self._temperature = temperature
        self._llm: ChatOllama | None = None

    def _get_llm(self) -> ChatOllama:
        if self._llm is None:
            from langchain_ollama import ChatOllama  # noqa: PLC0415

            self._llm = ChatOllama(
                model=self._model_name,
                base_url=self._base_url,
                temperature=self._temperature,
            )
        return self._llm

    async def complete_with_image(
        self,
        prompt: str,
        image_b64: str,
        *,
        system_prompt: str | None = None,
        json_output: bool = False,
    ) -> str:
        llm = self._get_llm()
        runnable = llm.bind(format="json") if json_output else llm

        log.debug(
            "ollama.complete_with_image",
            model=self._model_name,
            prompt_len=len(prompt),
            image_b64_len=len(image_b64),
            json_output=json_output,
        )
        response = await runnable.ainvoke(build_image_messages(prompt, image_b64, system_prompt))
        return response_text(response)

    async def get_model_info(self) -> dict[str, str]:
        return {"provider": "ollama", "model_name": self._model_name, "base_url": self._base_url}
