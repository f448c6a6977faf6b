import base64
import hashlib

import pytest
from fastapi.testclient import TestClient

from hashdrop_backend.app.core.config import Settings
from hashdrop_backend.app.main import create_app

BOUNDARY = "hashdropTestBoundary"


@pytest.fixture
def store_dir(tmp_path):
    d = tmp_path / "files"
    d.mkdir()
    return d


@pytest.fixture
def staging_dir(tmp_path):
    d = tmp_path / "tmp"
    d.mkdir()
    return d


@pytest.fixture
def settings(store_dir, staging_dir):
    return Settings(store_dir=str(store_dir), tmp_dir=str(staging_dir))


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


def expected_name(data: bytes, ext: str, keep=6, disallow="lIO0-") -> str:
    """Store name computed independently of the app code."""
    encoded = base64.urlsafe_b64encode(hashlib.sha256(data).digest()).decode().rstrip("=")
    stem = "".join(c for c in encoded if c not in disallow)[:keep]
    return stem + ext


def multipart_body(parts):
    """
    Build a multipart/form-data body by hand.

    parts: list of (field_name, filename_or_None, payload_bytes).
    filename=None gives a plain form field, "" gives an empty file input.
    """
    chunks = []
    for field, filename, payload in parts:
        disposition = f'form-data; name="{field}"'
        if filename is not None:
            disposition += f'; filename="{filename}"'
        chunks.append(f"--{BOUNDARY}\r\nContent-Disposition: {disposition}\r\n".encode())
        if filename is not None:
            chunks.append(b"Content-Type: application/octet-stream\r\n")
        chunks.append(b"\r\n" + payload + b"\r\n")
    chunks.append(f"--{BOUNDARY}--\r\n".encode())
    return b"".join(chunks)


MULTIPART_HEADERS = {"Content-Type": f"multipart/form-data; boundary={BOUNDARY}"}


def stored(store_dir):
    return sorted(p.name for p in store_dir.iterdir())
