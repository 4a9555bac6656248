import asyncio
import logging

from src.core.errors import PersistenceFailed
from src.core.workflow_state import IntakeState
from src.nodes.base import BaseNode
from src.services.storage.base import FileStorage

logger = logging.getLogger("pickup_intake.storage")


class PersistNode(BaseNode):
    name = "persist"

    def __init__(self, storage: FileStorage):
        self.storage = storage

    async def __call__(self, state: IntakeState) -> dict:
        profile = state["profile"]
        try:
            accepted = await asyncio.to_thread(
                self.storage.name_and_persist,
                state["candidate"],
                state.get("requester_id"),
                profile.subdirectory,
            )
        except PersistenceFailed as e:
            logger.warning(f"Persist failed: {e}")
            update = {"error_stage": "persist", "reason": str(e), "trajectory": self.visited(state)}
            if e.storage_key:
                update["storage_key"] = e.storage_key
            return update

        return {
            "accepted_file": accepted,
            "storage_key": accepted.storage_key,
            "trajectory": self.visited(state),
        }
