from pathlib import Path
from typing import Optional

import yaml

from src.services.prompt_store.base import PromptStore, PromptTemplate


class LocalPromptStore(PromptStore):
    """Prompt templates read from `<prompts_dir>/<language>/<category>.yaml`.

    Each top-level key of a file is a prompt name with `template`, `description`
    and `params` entries. Lookups fall back to `fallback_language` when the
    current language lacks a file or a prompt.
    """

    def __init__(self, prompts_dir: str | Path, language: str = "en", fallback_language: str = "en"):
        self._base_dir = Path(prompts_dir)
        self.language = language
        self.fallback_language = fallback_language
        self._cache: dict[str, Optional[dict]] = {}

        if not self._base_dir.exists():
            raise FileNotFoundError(f"Prompts directory not found: {self._base_dir}")

    def get(self, category: str, name: str) -> Optional[PromptTemplate]:
        for lang in (self.language, self.fallback_language):
            entries = self._load(category, lang)
            if entries and name in entries:
                entry = entries[name]
                return PromptTemplate(
                    name=f"{category}.{name}",
                    template=entry["template"],
                    description=entry.get("description", ""),
                    params=entry.get("params") or [],
                )
        return None

    def _load(self, category: str, lang: str) -> Optional[dict]:
        key = f"{lang}/{category}"
        if key not in self._cache:
            path = self._base_dir / lang / f"{category}.yaml"
            self._cache[key] = yaml.safe_load(path.read_text(encoding="utf-8")) if path.exists() else None
        return self._cache[key]
