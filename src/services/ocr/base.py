from abc import ABC, abstractmethod

from pydantic import BaseModel, Field


class OCRResult(BaseModel):
    """Recognized text plus the backend's own signal quality."""

    text: str = ""
    mean_confidence: float | None = Field(default=None, ge=0, le=100)
    page_count: int = 0


class OCRService(ABC):
    def open(self) -> None:
        """Acquire backend resources (engine check, scratch space). No-op by default."""

    def close(self) -> None:
        """Release whatever `open` acquired. No-op by default."""

    @abstractmethod
    def extract_text(self, pdf_bytes: bytes) -> OCRResult:
        """Extract text from PDF bytes."""
        ...
