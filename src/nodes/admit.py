import logging

from src.core.upload import Rejected
from src.core.workflow_state import IntakeState
from src.nodes.base import BaseNode
from src.services.admission import AdmissionFilter

logger = logging.getLogger("pickup_intake.admission")


class AdmitNode(BaseNode):
    name = "admit"

    def __call__(self, state: IntakeState) -> dict:
        candidate = state["candidate"]
        outcome = AdmissionFilter(state["profile"]).admit(candidate, state.get("batch_size", 1))

        if isinstance(outcome, Rejected):
            logger.warning(f"Rejected upload {candidate.original_name!r}: {outcome.reason}")
            return {
                "admitted": False,
                "rejection_code": outcome.code,
                "reason": outcome.reason,
                "trajectory": self.visited(state),
            }

        return {"admitted": True, "trajectory": self.visited(state)}
