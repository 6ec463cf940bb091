from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from infrastructure.llm.adapters.messages import build_image_messages, response_text

if TYPE_CHECKING:
    from langchain_openai import ChatOpenAI

log = structlog.get_logger(__name__)


class OpenAILLMClient:
    """LLMClientPort adapter backed by OpenAI via LangChain.

    Lazy-loads langchain_openai. Requires LLM_API_KEY to be set.
    """

    def __init__(
        self,
        model_name: str = "gpt-4o-mini",
        api_key: str | None = None,
        temperature: float = 0.1,
    ) -> None:
        self._model_name = model_name
        self._api_key = api_key
        self._temperature = temperature
        self._llm: ChatOpenAI | None = None

    def _get_llm(self) -> ChatOpenAI:
        if self._llm is None:
            from langchain_openai import ChatOpenAI  # noqa: PLC0415

            self._llm = ChatOpenAI(
                model=self._model_name,
                api_key=self._api_key,
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
        runnable = llm.bind(response_format={"type": "json_object"}) if json_output else llm

        log.debug("openai.complete_with_image", model=self._model_name, json_output=json_output)
        response = await runnable.ainvoke(build_image_messages(prompt, image_b64, system_prompt))
        return response_text(response)

    async def get_model_info(self) -> dict[str, str]:
        return {"provider": "openai", "model_name": self._model_name}
