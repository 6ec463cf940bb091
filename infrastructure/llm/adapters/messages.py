from __future__ import annotations

from typing import TYPE_CHECKING

from domain.value_objects.raster_image import strip_data_uri_prefix

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage


def build_image_messages(
    prompt: str,
    image_b64: str,
    system_prompt: str | None = None,
) -> list[BaseMessage]:
    """One human turn holding the instruction and a PNG as a data URI.

    ``image_b64`` may arrive bare or already wrapped in a data URI; the prefix is never doubled.
    """
    from langchain_core.messages import HumanMessage, SystemMessage  # noqa: PLC0415

    image_content = [
        {"type": "text", "text": prompt},
        {
            "type": "image_url",
            "image_url": {"url": f"data:image/png;base64,{strip_data_uri_prefix(image_b64)}"},
        },
    ]

    messages: list[BaseMessage] = []
    if system_prompt:
        messages.append(SystemMessage(content=system_prompt))
    messages.append(HumanMessage(content=image_content))
    return messages


def response_text(message: BaseMessage) -> str:
    """Flatten a chat response to text; some providers return a list of content blocks."""
    content = message.content
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)
