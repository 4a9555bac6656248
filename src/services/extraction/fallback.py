from datetime import datetime, timezone
from typing import Callable

from src.core.pickup_order import ExtractionResult
from src.services.extraction.base import ExtractionEngine
from src.services.extraction.record import KEY_FIELD_WEIGHTS, assemble_record

# Low-to-mid on purpose: the record is unverified and must go to human review.
FALLBACK_CONFIDENCE = 75.0


class FallbackExtractionEngine(ExtractionEngine):
    """Placeholder engine for deployments without a recognition backend.

    Returns a structurally complete record with sentinel values and a generated
    order number; the document bytes are not read.
    """

    def __init__(self, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self._clock = clock

    async def extract(self, pdf_bytes: bytes) -> ExtractionResult:
        record, substituted = assemble_record({}, FALLBACK_CONFIDENCE, self._clock())
        return ExtractionResult(
            data=record,
            field_confidences={field: 0.0 for field in KEY_FIELD_WEIGHTS},
            warnings=["No recognition backend configured: record needs manual entry", *substituted],
        )
