from typing import Literal

from pydantic import BaseModel

from src.core.pickup_order import ExtractionResult

IntakeStatus = Literal["extracted", "stored", "rejected", "invalid_format", "persist_failed", "extraction_failed"]


class IntakeOutcome(BaseModel):
    """What the pipeline hands back to the caller for a single upload."""

    status: IntakeStatus
    stage: str
    original_name: str
    storage_key: str | None = None
    reason: str | None = None
    result: ExtractionResult | None = None

    @property
    def ok(self) -> bool:
        return self.status == "extracted"

    @property
    def needs_review(self) -> bool:
        """True for failures (manual entry fallback) and for flagged extractions.

        Stored photos carry no record and never need review.
        """
        if self.status == "stored":
            return False
        if self.result is None:
            return True
        return self.result.review is None or self.result.review.needs_review
