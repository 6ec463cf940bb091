from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from infrastructure.llm.adapters.messages import build_image_messages, response_text

if TYPE_CHECKING:
    from langchain_google_genai import ChatGoogleGenerativeAI

log = structlog.get_logger(__name__)


class GeminiLLMClient:
    """LLMClientPort adapter backed by Google Gemini via LangChain.

    Lazy-loads langchain_google_genai. Requires LLM_API_KEY to be set.
    """

    def __init__(
        self,
        model_name: str = "gemini-2.5-flash",
        api_key: str | None = None,
        temperature: float = 0.1,
    ) -> None:
        self._model_name = model_name
        self._api_key = api_key
        self._temperature = temperature
        self._llm: ChatGoogleGenerativeAI | None = None
        self._json_llm: ChatGoogleGenerativeAI | None = None

    def _get_llm(self, *, json_output: bool) -> ChatGoogleGenerativeAI:
        from langchain_google_genai import ChatGoogleGenerativeAI  # noqa: PLC0415

        if json_output:
            if self._json_llm is None:
                self._json_llm = ChatGoogleGenerativeAI(
                    model=self._model_name,
                    google_api_key=self._api_key,
                    temperature=self._temperature,
                    response_mime_type="application/json",
                )
            return self._json_llm

        if self._llm is None:
            self._llm = ChatGoogleGenerativeAI(
                model=self._model_name,
                google_api_key=self._api_key,
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
        llm = self._get_llm(json_output=json_output)

        log.debug("gemini.complete_with_image", model=self._model_name, json_output=json_output)
        response = await llm.ainvoke(build_image_messages(prompt, image_b64, system_prompt))
        return response_text(response)

    async def get_model_info(self) -> dict[str, str]:
        return {"provider": "gemini", "model_name": self._model_name}
