import opik

from src.core.workflow_state import IntakeState
from src.nodes.base import BaseNode
from src.services.review import assess


class ReviewNode(BaseNode):
    name = "review"

    def __init__(self, review_threshold: float = 80.0):
        self.review_threshold = review_threshold

    @opik.track(name="review_node")
    def __call__(self, state: IntakeState) -> dict:
        result = state["extraction"]
        assessment = assess(
            result.data,
            review_threshold=self.review_threshold,
            defaulted_issue_date=result.field_confidences.get("issue_date") == 0.0,
        )
        return {
            "extraction": result.model_copy(update={"review": assessment}),
            "trajectory": self.visited(state),
        }
