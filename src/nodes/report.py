import logging

from src.core.workflow_state import IntakeState
from src.nodes.base import BaseNode

logger = logging.getLogger("pickup_intake.workflow")


class ReportNode(BaseNode):
    name = "report"

    def __call__(self, state: IntakeState) -> dict:
        if not state.get("admitted"):
            final_status = "rejected"
        elif state.get("error_stage") == "persist":
            final_status = "persist_failed"
        elif state.get("format_valid") is False:
            final_status = "invalid_format"
        elif state.get("error_stage") == "extract":
            final_status = "extraction_failed"
        elif state.get("extraction") is not None:
            final_status = "extracted"
        else:
            final_status = "stored"

        logger.info(f"Upload finished: status={final_status}, key={state.get('storage_key')}")
        return {
            "final_status": final_status,
            "trajectory": self.visited(state),
        }
