"""Unit tests for the OCR-backed and fallback extraction engines."""
from datetime import datetime, timezone

import pytest

from src.core.errors import ExtractionFailed
from src.core.pickup_order import PLACEHOLDER
from src.services.extraction.fallback import FALLBACK_CONFIDENCE, FallbackExtractionEngine
from src.services.extraction.ocr_engine import OCRExtractionEngine
from src.services.parsing.regex import RegexFieldParser
from tests.mocks import MockOCR

FIXED_NOW = datetime(2025, 6, 10, 8, 30, tzinfo=timezone.utc)


class TestOCRExtractionEngine:
    @pytest.mark.asyncio
    async def test_extracts_record_from_ocr_text(self, sample_text, pdf_bytes):
        engine = OCRExtractionEngine(MockOCR(text=sample_text), RegexFieldParser(), clock=lambda: FIXED_NOW)

        result = await engine.extract(pdf_bytes)

        assert result.data.order_number == "925511058895"
        assert result.data.basin_code == "2002048"
        assert result.data.confidence == 95.0
        assert result.raw_ocr_text == sample_text
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_ocr_confidence_scales_score(self, sample_text, pdf_bytes):
        engine = OCRExtractionEngine(MockOCR(text=sample_text, mean_confidence=90.0), RegexFieldParser())
        result = await engine.extract(pdf_bytes)
        assert result.data.confidence == 85.5

    @pytest.mark.asyncio
    async def test_unreadable_text_gives_placeholder_record(self, pdf_bytes):
        engine = OCRExtractionEngine(MockOCR(text=""), RegexFieldParser(), clock=lambda: FIXED_NOW)

        result = await engine.extract(pdf_bytes)

        assert result.data.has_generated_order_number()
        assert result.data.sender_name == PLACEHOLDER
        assert result.data.issue_date == FIXED_NOW.date()
        assert result.data.confidence == 20.0
        assert result.field_confidences["basin_code"] == 0.0
        assert any("not found" in w for w in result.warnings)
        assert any("placeholder" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_accepts_memoryview(self, sample_text):
        ocr = MockOCR(text=sample_text)
        await OCRExtractionEngine(ocr, RegexFieldParser()).extract(memoryview(b"%PDF-1.4"))
        assert ocr.calls == [b"%PDF-1.4"]

    @pytest.mark.asyncio
    async def test_copies_caller_buffer(self, sample_text):
        buffer = bytearray(b"%PDF-1.4 body")
        ocr = MockOCR(text=sample_text)

        await OCRExtractionEngine(ocr, RegexFieldParser()).extract(buffer)

        assert buffer == bytearray(b"%PDF-1.4 body")
        received = ocr.calls[0]
        assert type(received) is bytes
        buffer[:4] = b"XXXX"
        assert received == b"%PDF-1.4 body"

    @pytest.mark.asyncio
    async def test_extraction_failed_propagates(self, pdf_bytes):
        ocr = MockOCR(should_raise=ExtractionFailed("corrupt document: bad xref"))
        with pytest.raises(ExtractionFailed, match="corrupt document"):
            await OCRExtractionEngine(ocr, RegexFieldParser()).extract(pdf_bytes)

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self, pdf_bytes):
        ocr = MockOCR(should_raise=RuntimeError("segfault in leptonica"))
        with pytest.raises(ExtractionFailed, match="recognition failed: segfault"):
            await OCRExtractionEngine(ocr, RegexFieldParser()).extract(pdf_bytes)

    def test_open_and_close_delegate_to_ocr(self):
        ocr = MockOCR()
        engine = OCRExtractionEngine(ocr, RegexFieldParser())
        engine.open()
        engine.close()
        assert (ocr.opened, ocr.closed) == (1, 1)


class TestFallbackExtractionEngine:
    @pytest.mark.asyncio
    async def test_returns_placeholder_record(self, pdf_bytes):
        result = await FallbackExtractionEngine(clock=lambda: FIXED_NOW).extract(pdf_bytes)

        assert result.data.confidence == FALLBACK_CONFIDENCE == 75.0
        assert result.data.order_number.startswith("AUTO-")
        assert result.data.recipient_name == PLACEHOLDER
        assert result.data.issue_date == FIXED_NOW.date()
        assert set(result.field_confidences.values()) == {0.0}
        assert result.warnings[0].startswith("No recognition backend configured")

    @pytest.mark.asyncio
    async def test_order_numbers_are_unique(self, pdf_bytes):
        engine = FallbackExtractionEngine(clock=lambda: FIXED_NOW)
        first = await engine.extract(pdf_bytes)
        second = await engine.extract(pdf_bytes)
        assert first.data.order_number != second.data.order_number
