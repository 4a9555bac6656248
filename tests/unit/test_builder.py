"""Unit tests for IntakeBuilder wiring."""
from pathlib import Path
from unittest.mock import patch

import pytest

from src.builder import IntakeBuilder
from src.config import AppConfig
from src.lifecycle import ExtractionLifecycleManager
from src.services.extraction.fallback import FallbackExtractionEngine
from src.services.extraction.ocr_engine import OCRExtractionEngine
from src.services.ocr.tesseract import TesseractOCR
from src.services.parsing.llm import LLMFieldParser
from src.services.parsing.regex import RegexFieldParser
from src.services.storage.local import LocalFileStorage

MOCK_OPENAI = "src.services.llm.openai.OpenAI"
PROMPTS_DIR = str(Path(__file__).parents[2] / "prompts")


class TestIntakeBuilder:
    def test_build_returns_manager(self, tmp_path):
        manager = IntakeBuilder(AppConfig.for_tests(tmp_path)).build()

        assert isinstance(manager, ExtractionLifecycleManager)
        assert manager.default_profile.name == "document"
        assert isinstance(manager.storage, LocalFileStorage)

    def test_build_with_photo_profile(self, tmp_path):
        manager = IntakeBuilder(AppConfig.for_tests(tmp_path)).build(profile="photo")
        assert manager.default_profile.subdirectory == "photos"

    def test_ocr_engine_with_regex_parser(self, tmp_path):
        engine = IntakeBuilder(AppConfig.for_tests(tmp_path)).build_engine()

        assert isinstance(engine, OCRExtractionEngine)
        assert isinstance(engine.ocr, TesseractOCR)
        assert isinstance(engine.parser, RegexFieldParser)

    def test_each_engine_gets_its_own_ocr(self, tmp_path):
        builder = IntakeBuilder(AppConfig.for_tests(tmp_path))
        assert builder.build_engine().ocr is not builder.build_engine().ocr

    def test_fallback_engine(self, tmp_path):
        config = AppConfig(storage_root=str(tmp_path), extraction_engine="fallback")
        assert isinstance(IntakeBuilder(config).build_engine(), FallbackExtractionEngine)

    def test_llm_parser(self, tmp_path):
        config = AppConfig(storage_root=str(tmp_path), field_parser="llm", prompts_dir=PROMPTS_DIR)
        with patch(MOCK_OPENAI) as mock_cls:
            engine = IntakeBuilder(config).build_engine()

        assert isinstance(engine.parser, LLMFieldParser)
        mock_cls.assert_called_once()

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"extraction_engine": "magic"}, "Unknown extraction engine"),
            ({"ocr_engine": "easyocr"}, "Unknown OCR engine"),
            ({"field_parser": "nlp"}, "Unknown field parser"),
            ({"field_parser": "llm", "llm_provider": "acme"}, "Unknown LLM provider"),
            ({"field_parser": "llm", "prompt_store": "remote"}, "Unknown prompt store"),
        ],
    )
    def test_unknown_backends_fail_at_construction(self, tmp_path, overrides, message):
        config = AppConfig(storage_root=str(tmp_path), prompts_dir=PROMPTS_DIR, **overrides)
        with patch(MOCK_OPENAI), pytest.raises(ValueError, match=message):
            IntakeBuilder(config)

    def test_fallback_skips_ocr_checks(self, tmp_path):
        config = AppConfig(storage_root=str(tmp_path), extraction_engine="fallback", ocr_engine="easyocr")
        IntakeBuilder(config)
