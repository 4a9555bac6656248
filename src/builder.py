"""IntakeBuilder: wires services and the lifecycle manager based on AppConfig."""
from src.config import AppConfig
from src.lifecycle import ExtractionLifecycleManager
from src.services.extraction.base import ExtractionEngine
from src.services.extraction.fallback import FallbackExtractionEngine
from src.services.extraction.ocr_engine import OCRExtractionEngine
from src.services.llm.base import LLMService
from src.services.llm.openai import OpenAILLM
from src.services.ocr.base import OCRService
from src.services.ocr.tesseract import TesseractOCR
from src.services.parsing.base import FieldParser
from src.services.parsing.llm import LLMFieldParser
from src.services.parsing.regex import RegexFieldParser
from src.services.prompt_store.base import PromptStore
from src.services.prompt_store.local import LocalPromptStore
from src.services.storage.base import FileStorage
from src.services.storage.local import LocalFileStorage


class IntakeBuilder:
    """Builds the extraction lifecycle manager by wiring services from config.

    Backend names are checked eagerly so a bad config fails at startup, not on the
    first upload. OCR backends are created per session via `build_engine`.
    """

    def __init__(self, config: AppConfig):
        self.config = config

        if config.extraction_engine not in ("ocr", "fallback"):
            raise ValueError(f"Unknown extraction engine: {config.extraction_engine}")
        if config.extraction_engine == "ocr" and config.ocr_engine != "tesseract":
            raise ValueError(f"Unknown OCR engine: {config.ocr_engine}")

        self._storage = self._build_storage()
        self._parser = self._build_parser() if config.extraction_engine == "ocr" else None

    @property
    def storage(self) -> FileStorage:
        return self._storage

    def build(self, profile: str = "document") -> ExtractionLifecycleManager:
        """Build the manager; `profile` picks the default admission rules for its sessions."""
        return ExtractionLifecycleManager(
            storage=self._storage,
            engine_factory=self.build_engine,
            default_profile=self.config.admission_profile(profile),
            extraction_timeout=self.config.extraction_timeout_seconds,
            review_threshold=self.config.review_confidence_threshold,
        )

    def build_engine(self) -> ExtractionEngine:
        if self.config.extraction_engine == "fallback":
            return FallbackExtractionEngine()
        return OCRExtractionEngine(ocr=self._build_ocr(), parser=self._parser)

    def _build_storage(self) -> FileStorage:
        return LocalFileStorage(self.config.storage_root)

    def _build_ocr(self) -> OCRService:
        if self.config.ocr_engine == "tesseract":
            return TesseractOCR(lang=self.config.ocr_lang, dpi=self.config.ocr_dpi)
        raise ValueError(f"Unknown OCR engine: {self.config.ocr_engine}")

    def _build_parser(self) -> FieldParser:
        if self.config.field_parser == "regex":
            return RegexFieldParser()
        if self.config.field_parser == "llm":
            return LLMFieldParser(llm=self._build_llm(), prompt_store=self._build_prompt_store())
        raise ValueError(f"Unknown field parser: {self.config.field_parser}")

    def _build_llm(self) -> LLMService:
        if self.config.llm_provider == "openai":
            return OpenAILLM(
                model=self.config.llm_model,
                api_key=self.config.openai_api_key,
                base_url=self.config.llm_base_url,
                timeout=self.config.extraction_timeout_seconds,
            )
        raise ValueError(f"Unknown LLM provider: {self.config.llm_provider}")

    def _build_prompt_store(self) -> PromptStore:
        if self.config.prompt_store == "local":
            return LocalPromptStore(
                prompts_dir=self.config.prompts_dir,
                language=self.config.prompt_language,
                fallback_language=self.config.prompt_fallback_language,
            )
        raise ValueError(f"Unknown prompt store: {self.config.prompt_store}")
