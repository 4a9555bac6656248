import logging
from typing import Awaitable, Callable

from src.core.errors import ExtractionFailed
from src.core.pickup_order import ExtractionResult
from src.core.workflow_state import IntakeState
from src.nodes.base import BaseNode

logger = logging.getLogger("pickup_intake.extraction")


class ExtractNode(BaseNode):
    name = "extract"

    def __init__(self, run: Callable[[bytes], Awaitable[ExtractionResult]]):
        self.run = run

    async def __call__(self, state: IntakeState) -> dict:
        key = state.get("storage_key")
        try:
            result = await self.run(state["candidate"].content)
        except ExtractionFailed as e:
            e.storage_key = e.storage_key or key
            logger.warning(f"Extraction failed: {e}")
            return {"error_stage": "extract", "reason": str(e), "trajectory": self.visited(state)}

        return {"extraction": result, "trajectory": self.visited(state)}
