import logging

from src.core.workflow_state import IntakeState
from src.nodes.base import BaseNode
from src.services.format_validator import PDFFormatValidator

logger = logging.getLogger("pickup_intake.format")


class CheckFormatNode(BaseNode):
    name = "check_format"

    def __init__(self, validator: PDFFormatValidator | None = None):
        self.validator = validator or PDFFormatValidator()

    def __call__(self, state: IntakeState) -> dict:
        if self.validator.validate(state["candidate"].content):
            return {"format_valid": True, "trajectory": self.visited(state)}

        key = state.get("storage_key")
        logger.warning(f"Not a PDF, skipping extraction: {key}")
        return {
            "format_valid": False,
            "reason": f"[check_format] not a PDF document (missing %PDF header) (file: {key})",
            "trajectory": self.visited(state),
        }
