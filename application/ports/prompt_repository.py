from __future__ import annotations

from typing import Protocol


class PromptRepositoryPort(Protocol):
    """Port for loading and rendering the extraction prompts.

    The YAML adapter in infrastructure/llm/prompt_repositories/ is the only
    implementation; tests substitute a canned one.
    """

    async def render_prompt(self, name: str, **variables: str) -> str:
        """Render the prompt template called ``name``.

        Args:
            name: Prompt identifier (e.g. "page_extraction")
            **variables: Values substituted into ``{placeholders}`` in the template.

        Returns:
            The rendered prompt text.

        Raises:
            KeyError: If no prompt with that name exists, or a placeholder has
                no matching variable

        """
        ...
