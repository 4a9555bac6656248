"""Error taxonomy for the intake pipeline.

Each error carries the stage it was raised in and, when known, the storage key of
the file being processed, so callers can log or audit without extra bookkeeping.
Nothing here is retried by the pipeline itself.
"""


class IntakeError(Exception):
    """Base class for every failure reported by the intake pipeline."""

    stage: str = "intake"

    def __init__(self, reason: str, *, storage_key: str | None = None):
        super().__init__(reason)
        self.reason = reason
        self.storage_key = storage_key

    def __str__(self) -> str:
        if self.storage_key:
            return f"[{self.stage}] {self.reason} (file: {self.storage_key})"
        return f"[{self.stage}] {self.reason}"


class AdmissionRejected(IntakeError):
    """Raised form of an admission rejection, for callers that prefer exceptions."""

    stage = "admit"

    def __init__(self, reason: str, *, code: str = "rejected", storage_key: str | None = None):
        super().__init__(reason, storage_key=storage_key)
        self.code = code


class PersistenceFailed(IntakeError):
    """Writing an accepted file to storage failed (disk full, permissions, collision)."""

    stage = "persist"

    def __init__(self, cause: BaseException | str, *, storage_key: str | None = None):
        reason = f"could not persist file: {cause}"
        super().__init__(reason, storage_key=storage_key)
        self.cause = cause


class ExtractionFailed(IntakeError):
    """The extraction engine could not produce a record.

    Distinct from a low-confidence success: a low-confidence record is still returned
    normally.
    """

    stage = "extract"


class ResourceReleaseFailed(IntakeError):
    """Releasing session resources failed. Logged, never propagated."""

    stage = "release"

    def __init__(self, cause: BaseException | str):
        super().__init__(f"could not release extraction resources: {cause}")
        self.cause = cause
