from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field


class PromptTemplate(BaseModel):
    """A prompt template and the placeholders it expects."""
    name: str
    template: str
    description: str = ""
    params: list[str] = Field(default_factory=list)


class PromptStore(ABC):
    """Source of prompt templates, addressed as (category, name), e.g. ("extract", "system")."""

    @abstractmethod
    def get(self, category: str, name: str) -> Optional[PromptTemplate]:
        """Return the template, or None if neither the language nor its fallback has it."""
        ...

    @staticmethod
    def render(template: PromptTemplate, params: dict[str, Any]) -> str:
        missing = [p for p in template.params if p not in params]
        if missing:
            raise ValueError(f"Missing required parameters for template '{template.name}': {missing}")
        return template.template.format(**params)

    def get_and_render(self, category: str, name: str, params: Optional[dict[str, Any]] = None) -> str:
        template = self.get(category, name)
        if template is None:
            raise ValueError(f"Prompt template '{category}/{name}' not found")
        return self.render(template, params or {})
