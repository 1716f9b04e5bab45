from __future__ import annotations

import io
import itertools
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Point settings at throwaway locations before any project module is imported
_TMP = tempfile.mkdtemp(prefix="company-directory-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP}/default.db")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TMP, "uploads"))

root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from starlette.datastructures import UploadFile  # noqa: E402

from database import Base, get_db  # noqa: E402
from dependencies import get_blob_store  # noqa: E402
from main import app  # noqa: E402
from services.errors import UploadError  # noqa: E402
from services.storage import BlobStore  # noqa: E402


class RecordingBlobStore(BlobStore):
    """In-memory blob store that records every call and can be told to fail."""

    def __init__(self):
        self.objects = {}
        self.saved = []
        self.deleted = []
        self.fail_saves = set()     # filenames whose upload is rejected
        self.fail_deletes = set()   # references whose deletion raises
        self._ids = itertools.count(1)

    def save(self, filename, fileobj, content_type=None):
        if filename in self.fail_saves:
            raise UploadError(f"Storage rejected {filename}")
        reference = f"mem://{next(self._ids)}/{filename}"
        self.objects[reference] = fileobj.read()
        self.saved.append(reference)
        return reference

    def delete(self, reference):
        self.deleted.append(reference)
        if reference in self.fail_deletes:
            raise RuntimeError(f"Storage unavailable for {reference}")
        if reference not in self.objects:
            raise FileNotFoundError(reference)
        del self.objects[reference]


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'companies.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def blob_store():
    return RecordingBlobStore()


@pytest.fixture
def client(session_factory, blob_store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_upload(filename: str, content: bytes = b"file-bytes") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)


def company_form(**overrides):
    form = {"name": "Acme Interiors", "projects": "10", "experience": "5", "branches": "2"}
    form.update(overrides)
    return form
