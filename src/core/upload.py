from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.errors import AdmissionRejected

IMAGE_MIME_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/webp"]
DOCUMENT_MIME_TYPES = ["application/pdf"]
DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024
DEFAULT_MAX_FILES = 10


class UploadCandidate(BaseModel):
    """Raw upload as handed over by the transport layer, before admission."""

    content: bytes
    mime_type: str
    original_name: str
    size: int = Field(ge=0)

    @model_validator(mode="before")
    @classmethod
    def _default_size(cls, data):
        if isinstance(data, dict) and data.get("size") is None:
            data = {**data, "size": len(data.get("content") or b"")}
        return data


class AdmissionProfile(BaseModel):
    """Admission rules for one kind of upload (photos, PDF orders)."""

    model_config = ConfigDict(frozen=True)

    name: str
    allowed_mime_types: tuple[str, ...]
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_files: int = DEFAULT_MAX_FILES
    subdirectory: str = ""
    requires_extraction: bool = False

    @classmethod
    def photo(cls, **overrides) -> "AdmissionProfile":
        values = {"name": "photo", "allowed_mime_types": tuple(IMAGE_MIME_TYPES), "subdirectory": "photos"}
        return cls(**{**values, **overrides})

    @classmethod
    def document(cls, **overrides) -> "AdmissionProfile":
        values = {
            "name": "document",
            "allowed_mime_types": tuple(DOCUMENT_MIME_TYPES),
            "subdirectory": "orders",
            "requires_extraction": True,
        }
        return cls(**{**values, **overrides})


class Accepted(BaseModel):
    """Admission outcome: the candidate may be stored."""

    accepted: Literal[True] = True
    candidate: UploadCandidate
    profile: AdmissionProfile


class Rejected(BaseModel):
    """Admission outcome: the candidate was refused. A normal result, not a fault."""

    accepted: Literal[False] = False
    reason: str
    code: Literal["too_many_files", "too_large", "unsupported_type"]

    def raise_for_rejection(self) -> None:
        raise AdmissionRejected(self.reason, code=self.code)


AdmissionOutcome = Accepted | Rejected


class AcceptedFile(BaseModel):
    """An admitted upload after it has been named and written to storage."""

    model_config = ConfigDict(frozen=True)

    storage_key: str
    path: Path
    original_name: str
    mime_type: str
    size: int
    requester_id: str
    stored_at: datetime
