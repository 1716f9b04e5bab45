from functools import lru_cache

from config.settings import settings
from database import get_db
from services.storage import BlobStore, LocalBlobStore

__all__ = ["get_db", "get_blob_store"]


@lru_cache()
def get_blob_store() -> BlobStore:
    """Blob store dependency: local uploads directory served under /uploads."""
    return LocalBlobStore(
        root=settings.UPLOAD_DIR,
        url_prefix=settings.UPLOAD_URL_PREFIX,
        max_file_size=settings.MAX_FILE_SIZE,
        allowed_extensions=settings.ALLOWED_UPLOAD_EXTENSIONS,
    )
