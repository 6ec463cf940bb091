from __future__ import annotations

from pathlib import Path

import structlog
import yaml

log = structlog.get_logger(__name__)

_DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parents[1] / "default_prompts"


class YamlPromptRepository:
    """PromptRepositoryPort adapter that reads prompts from YAML files.

    Files are read from ``{prompts_dir}/{name}.yaml`` and must hold a ``template``
    key. Templates are rendered with ``str.format_map``, so literal braces (JSON
    examples) are written doubled. Each file is read once per repository.
    """

    def __init__(self, prompts_dir: Path = _DEFAULT_PROMPTS_DIR) -> None:
        self._dir = Path(prompts_dir)
        self._templates: dict[str, str] = {}

    def _load(self, name: str) -> str:
        path = self._dir / f"{name}.yaml"
        if not path.is_file():
            msg = f"Prompt file not found: {path}"
            raise KeyError(msg)

        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        template = data.get("template")
        if not isinstance(template, str):
            msg = f"Prompt file {path} has no 'template' string"
            raise KeyError(msg)

        log.debug("yaml_prompt_repo.loaded", name=name, path=str(path))
        return template

    async def render_prompt(self, name: str, **variables: str) -> str:
        if name not in self._templates:
            self._templates[name] = self._load(name)
        return self._templates[name].format_map(variables)
