"""Blob storage for uploaded company assets.

The pipelines only see ``BlobStore``: ``save`` returns an opaque reference that
is written onto the record, ``delete`` removes the object behind a reference.
"""
import logging
import os
import uuid
from typing import BinaryIO, Iterable, Optional

from services.errors import UploadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class BlobStore:
    """Operations the company pipelines need from a file storage provider."""

    def save(self, filename: str, fileobj: BinaryIO, content_type: Optional[str] = None) -> str:
        """Persist ``fileobj`` as a new object and return its reference.

        Every call must create a fresh object, so two records never share a
        reference. Raises ``UploadError`` when the file is rejected.
        """

        raise NotImplementedError

    def delete(self, reference: str) -> None:
        """Remove the object behind ``reference``.

        Raises ``FileNotFoundError`` when nothing is stored under it.
        """

        raise NotImplementedError


class LocalBlobStore(BlobStore):
    """Stores uploads as files under ``root`` and serves them at ``url_prefix``."""

    def __init__(
        self,
        root: str,
        url_prefix: str = "/uploads",
        max_file_size: int = 10 * 1024 * 1024,
        allowed_extensions: Optional[Iterable[str]] = None,
    ):
        self.root = os.path.abspath(root)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_file_size = max_file_size
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions} if allowed_extensions else None
        os.makedirs(self.root, exist_ok=True)

    def save(self, filename: str, fileobj: BinaryIO, content_type: Optional[str] = None) -> str:
        extension = os.path.splitext(filename or "")[1].lower()
        if self.allowed_extensions is not None and extension not in self.allowed_extensions:
            raise UploadError(f"File type '{extension or filename}' is not allowed")

        stored_name = f"{uuid.uuid4().hex}{extension}"
        path = os.path.join(self.root, stored_name)
        written = 0
        try:
            with open(path, "wb") as target:
                while True:
                    chunk = fileobj.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_file_size:
                        raise UploadError(
                            f"File '{filename}' exceeds the {self.max_file_size} byte limit"
                        )
                    target.write(chunk)
        except UploadError:
            os.remove(path)
            raise
        except OSError as e:
            if os.path.exists(path):
                os.remove(path)
            raise UploadError(f"Failed to store '{filename}': {e}") from e

        logger.info(f"Stored upload {filename} as {stored_name} ({written} bytes)")
        return f"{self.url_prefix}/{stored_name}"

    def delete(self, reference: str) -> None:
        os.remove(self._path_for(reference))
        logger.info(f"Deleted stored object {reference}")

    def _path_for(self, reference: str) -> str:
        prefix = f"{self.url_prefix}/"
        if not reference.startswith(prefix):
            raise FileNotFoundError(f"Reference {reference!r} is not managed by this store")
        name = reference[len(prefix):]
        if not name or os.path.basename(name) != name:
            raise FileNotFoundError(f"Reference {reference!r} is not managed by this store")
        return os.path.join(self.root, name)
