from abc import ABC, abstractmethod

from src.core.pickup_order import ExtractionResult


class ExtractionEngine(ABC):
    """Turns validated PDF bytes into a complete, confidence-scored pickup order.

    `open` and `close` bracket a session; `extract` may be called many times in
    between, one call at a time.
    """

    def open(self) -> None:
        """Acquire engine resources. No-op by default."""

    def close(self) -> None:
        """Release what `open` acquired. No-op by default."""

    @abstractmethod
    async def extract(self, pdf_bytes: bytes) -> ExtractionResult:
        """Extract a record. Raises ExtractionFailed; low confidence is not a failure."""
        ...
