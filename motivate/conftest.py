"""
conftest.py

Test configuration for motivate tests.

Defines pytest fixtures for supplying test data to tests across the entire test suite. Fixtures used
within only a single module are defined directly in that module. conftest.py should only be used for
universal fixtures.

Test images are generated with Pillow rather than checked in, so every test gets small, valid image
bytes in a known format.
"""

import io
import json
import unittest.mock
from pathlib import Path

import pytest
import requests
from PIL import Image

from motivate.backend import BackendClient
from motivate.offline_cache import OfflineImageCache
from motivate.shared_store import SharedStore


def make_image_bytes(color=(200, 120, 40), size=(8, 8), image_format="PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=image_format)
    return buffer.getvalue()


def make_response(status_code=200, body=None, content=None, url="https://example.supabase.co"):
    """
    Build a real requests Response so that raise_for_status() and json() behave exactly as they
    do against a live server.
    """

    response = requests.models.Response()
    response.status_code = status_code
    response.url = url

    if content is not None:
        response._content = content
    elif body is not None:
        response._content = json.dumps(body).encode()
    else:
        response._content = b""

    return response


@pytest.fixture
def test_image_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def test_image(tmp_path, test_image_bytes) -> Path:
    """
    A PNG image written to the test's temporary directory.
    """

    path = tmp_path / "sunrise.png"
    path.write_bytes(test_image_bytes)
    return path


@pytest.fixture
def store(tmp_path) -> SharedStore:
    return SharedStore(tmp_path / "data" / "motivate.db")


@pytest.fixture
def cache(store) -> OfflineImageCache:
    return OfflineImageCache(store, capacity=3)


@pytest.fixture
def session():
    """An autospecced requests.Session; set .request.return_value or .side_effect per test."""

    return unittest.mock.create_autospec(requests.Session, instance=True)


@pytest.fixture
def client(session) -> BackendClient:
    return BackendClient("https://example.supabase.co", "test-key", timeout=2.0, session=session)
