import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from src.core.errors import ExtractionFailed
from src.core.pickup_order import ExtractionResult
from src.services.extraction.base import ExtractionEngine
from src.services.extraction.record import aggregate_confidence, assemble_record
from src.services.ocr.base import OCRService
from src.services.parsing.base import FieldParser

logger = logging.getLogger("pickup_intake.extraction")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OCRExtractionEngine(ExtractionEngine):
    """OCR backend + field parser.

    Both are blocking, so they run in worker threads to keep the event loop free for
    other uploads.
    """

    def __init__(self, ocr: OCRService, parser: FieldParser, clock: Callable[[], datetime] = _utcnow):
        self.ocr = ocr
        self.parser = parser
        self._clock = clock

    def open(self) -> None:
        self.ocr.open()

    def close(self) -> None:
        self.ocr.close()

    async def extract(self, pdf_bytes: bytes) -> ExtractionResult:
        data = bytes(pdf_bytes)
        try:
            ocr_result = await asyncio.to_thread(self.ocr.extract_text, data)
            parsed = await asyncio.to_thread(self.parser.parse, ocr_result.text)
        except ExtractionFailed:
            raise
        except Exception as e:
            raise ExtractionFailed(f"recognition failed: {e}") from e

        confidence = aggregate_confidence(parsed.field_confidences, ocr_result.mean_confidence)
        record, substituted = assemble_record(parsed.values, confidence, self._clock())
        logger.info(
            f"Extracted order {record.order_number}: confidence={confidence}, "
            f"pages={ocr_result.page_count}, placeholders={len(substituted)}"
        )
        return ExtractionResult(
            data=record,
            field_confidences=parsed.field_confidences,
            raw_ocr_text=ocr_result.text,
            warnings=[*parsed.warnings, *substituted],
        )
