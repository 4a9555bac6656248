"""Extraction sessions: scoped ownership of engine resources plus per-upload orchestration.

    manager = IntakeBuilder(config).build()
    manager.initialize()
    async with manager.open() as session:
        outcomes = await session.process_batch(candidates, requester_id="user-42")

Each session gets its own engine instance, opened once and closed exactly once.
"""
import asyncio
import logging
from typing import Callable

from src.core.errors import ExtractionFailed, ResourceReleaseFailed
from src.core.outcome import IntakeOutcome
from src.core.pickup_order import ExtractionResult
from src.core.upload import AdmissionProfile, UploadCandidate
from src.nodes.admit import AdmitNode
from src.nodes.check_format import CheckFormatNode
from src.nodes.extract import ExtractNode
from src.nodes.persist import PersistNode
from src.nodes.report import ReportNode
from src.nodes.review import ReviewNode
from src.services.admission import AdmissionFilter
from src.services.extraction.base import ExtractionEngine
from src.services.storage.base import FileStorage
from src.workflow import build_graph

logger = logging.getLogger("pickup_intake.lifecycle")


def _to_outcome(state: dict) -> IntakeOutcome:
    trajectory = state.get("trajectory", [])
    status = state["final_status"]
    return IntakeOutcome(
        status=status,
        stage=trajectory[-2] if len(trajectory) > 1 else "admit",
        original_name=state["candidate"].original_name,
        storage_key=state.get("storage_key"),
        reason=state.get("reason"),
        result=state.get("extraction") if status == "extracted" else None,
    )


class ExtractionSession:
    """A bounded batch of work sharing one opened extraction engine.

    `run` calls are serialized; each is bounded by `timeout` seconds. `close` is
    idempotent and never raises.
    """

    def __init__(
        self,
        engine: ExtractionEngine,
        storage: FileStorage,
        profile: AdmissionProfile,
        timeout: float | None = 60.0,
        review_threshold: float = 80.0,
    ):
        self._engine = engine
        self._profile = profile
        self._timeout = timeout
        self._lock = asyncio.Lock()
        self._closed = False
        self._graph = build_graph(
            AdmitNode(),
            PersistNode(storage),
            CheckFormatNode(),
            ExtractNode(self.run),
            ReviewNode(review_threshold),
            ReportNode(),
        )

    @property
    def closed(self) -> bool:
        return self._closed

    async def run(self, pdf_bytes: bytes) -> ExtractionResult:
        """Extract one document. Raises ExtractionFailed, including on timeout or cancellation.

        Blocking backends run in worker threads that cannot be interrupted, so on timeout
        or cancellation the lock is held until the abandoned work has actually finished.
        """
        async with self._lock:
            if self._closed:
                raise ExtractionFailed("session closed")
            task = asyncio.ensure_future(self._engine.extract(pdf_bytes))
            try:
                return await asyncio.wait_for(asyncio.shield(task), timeout=self._timeout)
            except asyncio.TimeoutError as e:
                await self._wait_out(task)
                raise ExtractionFailed(f"cancelled: timed out after {self._timeout:g}s") from e
            except asyncio.CancelledError as e:
                await self._wait_out(task)
                raise ExtractionFailed("cancelled") from e

    @staticmethod
    async def _wait_out(task: asyncio.Future) -> None:
        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Abandoned extraction ended with: {task.exception()}")

    async def process(
        self,
        candidate: UploadCandidate,
        requester_id: str | None = None,
        batch_size: int = 1,
        profile: AdmissionProfile | None = None,
    ) -> IntakeOutcome:
        """Admit, store, check and extract a single upload."""
        state = await self._graph.ainvoke({
            "candidate": candidate,
            "requester_id": requester_id,
            "batch_size": batch_size,
            "profile": profile or self._profile,
            "trajectory": [],
        })
        return _to_outcome(state)

    async def process_batch(
        self,
        candidates: list[UploadCandidate],
        requester_id: str | None = None,
        profile: AdmissionProfile | None = None,
    ) -> list[IntakeOutcome]:
        """Process uploads concurrently. An oversized batch is rejected before anything is stored.

        Storage keys are `{millis}_{requester}_{name}`, so two uploads with the same name
        stored in the same millisecond collide: one is stored, the other ends `persist_failed`.
        """
        profile = profile or self._profile
        batch_size = len(candidates)
        if batch_size > profile.max_files:
            admission = AdmissionFilter(profile)
            outcomes = []
            for candidate in candidates:
                rejection = admission.admit(candidate, batch_size)
                outcomes.append(IntakeOutcome(
                    status="rejected",
                    stage="admit",
                    original_name=candidate.original_name,
                    reason=rejection.reason,
                ))
            logger.warning(f"Rejected batch of {batch_size} files (max {profile.max_files})")
            return outcomes

        outcomes = await asyncio.gather(
            *(self.process(c, requester_id, batch_size, profile) for c in candidates)
        )
        extracted = sum(1 for o in outcomes if o.ok)
        logger.info(f"Batch finished: {extracted}/{batch_size} extracted")
        return list(outcomes)

    def close(self) -> None:
        """Release the engine now. Prefer `aclose` while a `run` may still be in flight."""
        if self._closed:
            return
        self._closed = True
        try:
            self._engine.close()
        except Exception as e:
            logger.error(str(ResourceReleaseFailed(e)))

    async def aclose(self) -> None:
        """Close once any in-flight `run` has finished."""
        async with self._lock:
            self.close()

    async def __aenter__(self) -> "ExtractionSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class ExtractionLifecycleManager:
    """Creates extraction sessions and owns the one-time storage setup."""

    def __init__(
        self,
        storage: FileStorage,
        engine_factory: Callable[[], ExtractionEngine],
        default_profile: AdmissionProfile,
        extraction_timeout: float | None = 60.0,
        review_threshold: float = 80.0,
    ):
        self.storage = storage
        self._engine_factory = engine_factory
        self.default_profile = default_profile
        self._extraction_timeout = extraction_timeout
        self._review_threshold = review_threshold
        self._initialized = False

    def initialize(self) -> None:
        """Create the storage root. Safe to call repeatedly and from concurrent starters."""
        self.storage.ensure_root()
        self._initialized = True

    def open(self) -> ExtractionSession:
        if not self._initialized:
            self.initialize()
        engine = self._engine_factory()
        try:
            engine.open()
        except Exception:
            try:
                engine.close()
            except Exception as e:
                logger.error(str(ResourceReleaseFailed(e)))
            raise
        return ExtractionSession(
            engine,
            self.storage,
            self.default_profile,
            timeout=self._extraction_timeout,
            review_threshold=self._review_threshold,
        )
