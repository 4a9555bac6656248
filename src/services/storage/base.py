from abc import ABC, abstractmethod

from src.core.upload import AcceptedFile, UploadCandidate


class FileStorage(ABC):
    @abstractmethod
    def ensure_root(self) -> None:
        """Create the storage root if missing. Idempotent and safe under races."""
        ...

    @abstractmethod
    def name_and_persist(
        self, candidate: UploadCandidate, requester_id: str | None, subdirectory: str = ""
    ) -> AcceptedFile:
        """Assign a storage key to an admitted upload and write its bytes.

        Raises PersistenceFailed if the bytes cannot be written.
        """
        ...
