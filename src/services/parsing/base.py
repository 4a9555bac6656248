from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

# Fields whose recognition certainty drives the overall confidence score.
KEY_FIELDS = ["order_number", "issue_date", "sender_name", "recipient_name", "basin_code"]


class ParsedFields(BaseModel):
    """Field values read from recognized text, keyed by ExtractedPickupOrderData field name.

    Values are already typed (str, float, datetime.date). Fields that were not found are
    absent from `values`; key fields always appear in `field_confidences` (0.0 if missing).
    """

    values: dict[str, Any] = Field(default_factory=dict)
    field_confidences: dict[str, float] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)


class FieldParser(ABC):
    @abstractmethod
    def parse(self, text: str) -> ParsedFields:
        """Read pickup order fields out of OCR text."""
        ...
