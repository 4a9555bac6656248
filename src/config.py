from pathlib import Path

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.upload import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_FILES,
    DOCUMENT_MIME_TYPES,
    IMAGE_MIME_TYPES,
    AdmissionProfile,
)


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    storage_root: str = "uploads"

    # Admission
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE
    max_files_per_batch: int = DEFAULT_MAX_FILES
    image_mime_types: list[str] = IMAGE_MIME_TYPES
    document_mime_types: list[str] = DOCUMENT_MIME_TYPES

    # Extraction
    extraction_engine: str = "ocr"  # "ocr" | "fallback"
    ocr_engine: str = "tesseract"
    ocr_lang: str = "ita"
    ocr_dpi: int = 300
    field_parser: str = "regex"  # "regex" | "llm"
    extraction_timeout_seconds: float = 60.0

    # Review
    review_confidence_threshold: float = 80.0

    # LLM (field_parser="llm")
    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"
    llm_base_url: str | None = None
    openai_api_key: str | None = None

    # Prompt store
    prompt_store: str = "local"
    prompts_dir: str = "prompts"
    prompt_language: str = "en"
    prompt_fallback_language: str = "en"

    # Opik
    opik_workspace: str | None = None
    opik_project: str = "pickup-intake"
    opik_api_key: str | None = None

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AppConfig":
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def for_local(cls) -> "AppConfig":
        """No OCR install needed: placeholder extraction, uploads under ./uploads."""
        return cls(extraction_engine="fallback")

    @classmethod
    def for_tests(cls, storage_root: str | Path) -> "AppConfig":
        """Regex parsing over a temp storage root; OCR is expected to be swapped for a fake."""
        return cls(storage_root=str(storage_root), field_parser="regex", extraction_timeout_seconds=5.0)

    def admission_profile(self, name: str) -> AdmissionProfile:
        limits = {"max_file_size": self.max_file_size_bytes, "max_files": self.max_files_per_batch}
        if name == "photo":
            return AdmissionProfile.photo(allowed_mime_types=tuple(self.image_mime_types), **limits)
        if name == "document":
            return AdmissionProfile.document(allowed_mime_types=tuple(self.document_mime_types), **limits)
        raise ValueError(f"Unknown admission profile: {name}")
