import logging
import re
import uuid
from collections.abc import Iterator
from functools import lru_cache
from pathlib import Path
from typing import BinaryIO

from app.core.config import get_settings
from app.core.exceptions import NotFoundError, StorageUnavailable

logger = logging.getLogger(__name__)

# uuid4 hex, optionally followed by a thumbnail width suffix.
_REF_PATTERN = re.compile(r"^[0-9a-f]{32}(_[0-9]+)?$")


class BlobStore:
    """Whole-file blob storage on a local directory, addressed by opaque references."""

    def __init__(self, root: str | Path, chunk_size: int = 64 * 1024) -> None:
        self.root = Path(root).resolve()
        self.chunk_size = chunk_size
        self._root_ready = False

    def _ensure_root(self) -> Path:
        if not self._root_ready:
            self.root.mkdir(parents=True, exist_ok=True)
            self._root_ready = True
        return self.root

    def path(self, ref: str) -> Path:
        if not _REF_PATTERN.match(ref or ""):
            raise NotFoundError()
        return self.root / ref

    def put(self, data: bytes) -> str:
        ref = uuid.uuid4().hex
        self._write(ref, data)
        return ref

    def put_derived(self, ref: str, width: int, data: bytes) -> str:
        derived_ref = derived_ref_for(ref, width)
        self._write(derived_ref, data)
        return derived_ref

    def _write(self, ref: str, data: bytes) -> None:
        self._ensure_root()
        target = self.path(ref)
        try:
            target.write_bytes(data)
        except OSError as exc:
            logger.exception("blob_write_failed", extra={"ref": ref})
            raise StorageUnavailable() from exc

    def delete(self, ref: str) -> None:
        self.path(ref).unlink(missing_ok=True)

    def exists(self, ref: str | None) -> bool:
        if not ref:
            return False
        try:
            return self.path(ref).is_file()
        except NotFoundError:
            return False

    def read_bytes(self, ref: str) -> bytes:
        with self._open(ref) as handle:
            try:
                return handle.read()
            except OSError as exc:
                raise StorageUnavailable() from exc

    def stream(self, ref: str) -> "BlobStream":
        """Open ``ref`` eagerly so missing blobs fail before any byte is sent."""
        return BlobStream(ref, self._open(ref), self.chunk_size)

    def _open(self, ref: str) -> BinaryIO:
        try:
            return self.path(ref).open("rb")
        except FileNotFoundError as exc:
            raise NotFoundError() from exc
        except OSError as exc:
            logger.exception("blob_open_failed", extra={"ref": ref})
            raise StorageUnavailable() from exc


class BlobStream:
    """Chunked reader over an open blob. ``close()`` releases the handle even if no chunk was read."""

    def __init__(self, ref: str, handle: BinaryIO, chunk_size: int) -> None:
        self.ref = ref
        self._handle = handle
        self._chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        if self._handle.closed:
            raise StopIteration
        try:
            chunk = self._handle.read(self._chunk_size)
        except OSError as exc:
            self.close()
            logger.exception("blob_read_failed", extra={"ref": self.ref})
            raise StorageUnavailable() from exc
        if not chunk:
            self.close()
            raise StopIteration
        return chunk

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def close(self) -> None:
        self._handle.close()


def derived_ref_for(ref: str, width: int) -> str:
    return f"{ref}_{width}"


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStore:
    settings = get_settings()
    return BlobStore(settings.folder_path, chunk_size=settings.stream_chunk_size)
