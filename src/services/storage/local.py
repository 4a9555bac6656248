import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from src.core.errors import PersistenceFailed
from src.core.upload import AcceptedFile, UploadCandidate
from src.services.storage.base import FileStorage

logger = logging.getLogger("pickup_intake.storage")

ANONYMOUS = "anonymous"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.-]")


def sanitize_name(name: str) -> str:
    """Replace every character outside [A-Za-z0-9.-] with '_'."""
    return _UNSAFE_CHARS.sub("_", name)


def requester_tag(requester_id: str | None) -> str:
    """Audit tag for the uploader. Not an identity check: never infer trust from it."""
    if requester_id and requester_id.strip():
        return sanitize_name(requester_id.strip())
    return ANONYMOUS


def build_storage_key(timestamp_ms: int, requester_id: str | None, original_name: str) -> str:
    """Storage key: {unixTimestampMillis}_{requesterId or anonymous}_{sanitizedName}.

    The requester id goes through the same sanitization as the file name so the key
    never leaves [A-Za-z0-9._-].
    """
    return f"{timestamp_ms}_{requester_tag(requester_id)}_{sanitize_name(original_name)}"


class LocalFileStorage(FileStorage):
    """Stores admitted uploads as uniquely named files under a root directory.

    Layout:
        <root>/
        ├── photos/1718000000000_user-42_truck.jpg
        └── orders/1718000000123_anonymous_buono_ritiro.pdf

    Files are only ever created, never overwritten, so concurrent writers need no lock.
    """

    def __init__(self, root: str | Path, clock: Callable[[], float] = time.time):
        self._root = Path(root)
        self._clock = clock

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _discard(path: Path) -> None:
        """Remove a partially written file so no truncated upload survives under a valid key."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Could not remove partial upload {path}: {e}")

    def name_and_persist(
        self, candidate: UploadCandidate, requester_id: str | None, subdirectory: str = ""
    ) -> AcceptedFile:
        now = self._clock()
        storage_key = build_storage_key(int(now * 1000), requester_id, candidate.original_name)
        directory = self._root / subdirectory if subdirectory else self._root
        path = directory / storage_key

        created = False
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with open(path, "xb") as f:
                created = True
                f.write(candidate.content)
        except OSError as e:
            if created:
                self._discard(path)
            raise PersistenceFailed(e, storage_key=storage_key) from e

        logger.info(f"Stored upload: key={storage_key}, size={candidate.size}, dir={directory}")
        return AcceptedFile(
            storage_key=storage_key,
            path=path,
            original_name=candidate.original_name,
            mime_type=candidate.mime_type,
            size=candidate.size,
            requester_id=requester_tag(requester_id),
            stored_at=datetime.fromtimestamp(now, tz=timezone.utc),
        )
