from typing import TypedDict

from src.core.pickup_order import ExtractionResult
from src.core.upload import AcceptedFile, AdmissionProfile, UploadCandidate


class IntakeState(TypedDict, total=False):
    # --- Input (populated by the session) ---
    candidate: UploadCandidate
    requester_id: str | None
    batch_size: int
    profile: AdmissionProfile

    # --- Admission ---
    admitted: bool
    rejection_code: str

    # --- Storage ---
    accepted_file: AcceptedFile
    storage_key: str

    # --- Format check ---
    format_valid: bool

    # --- Extraction & review ---
    extraction: ExtractionResult

    # --- Failures ---
    error_stage: str                     # "persist" | "extract"
    reason: str

    # --- Tracking ---
    trajectory: list[str]                # node names visited

    # --- Final ---
    final_status: str                    # see src.core.outcome.IntakeStatus
