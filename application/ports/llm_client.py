from __future__ import annotations

from typing import Protocol


class LLMClientPort(Protocol):
    """Port for making multimodal LLM inference calls.

    Provider-agnostic interface. Concrete adapters live in
    infrastructure/llm/adapters/ and implement Ollama, OpenAI and Gemini.

    Following the Ports & Adapters pattern from Clean Architecture.
    """

    async def complete_with_image(
        self,
        prompt: str,
        image_b64: str,
        *,
        system_prompt: str | None = None,
        json_output: bool = False,
    ) -> str:
        """Send a multimodal prompt (text + image) and return the model's response.

        Args:
            prompt: The user prompt to send alongside the image
            image_b64: Bare base64-encoded PNG (no data-URI prefix)
            system_prompt: Optional system/instruction prompt
            json_output: Ask the provider to constrain its output to JSON

        Returns:
            The model's raw text response

        Raises:
            RuntimeError: If the LLM call fails or the model doesn't support images

        """
        ...

    async def get_model_info(self) -> dict[str, str]:
        """Get metadata about the active model.

        Returns:
            Dictionary with at minimum: provider, model_name

        """
        ...
