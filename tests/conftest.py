"""Pytest configuration and fixtures."""

import io
from unittest.mock import MagicMock

import pytest
from PIL import Image

from doc_processor import codec
from doc_processor.gateway import Gateway
from doc_processor.models import UploadedImage
from doc_processor.orchestrator import Orchestrator
from doc_processor.session import SessionStore
from doc_processor.storage import MemoryStore


def _image_bytes(fmt: str = "PNG", color: str = "white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color=color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return _image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _image_bytes("JPEG", color="black")


@pytest.fixture
def make_upload(png_bytes):
    """Factory for distinct uploads of the same small PNG."""
    def _make(name: str = "page.png", mtime: int = 1700000000000, media_type: str = "image/png") -> UploadedImage:
        return UploadedImage(name=name, data=png_bytes, media_type=media_type, mtime=mtime)
    return _make


@pytest.fixture
def encoded_png(png_bytes) -> str:
    return codec.encode(png_bytes, "image/png")


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def session_store(memory_store) -> SessionStore:
    return SessionStore(storage=memory_store, key="testState")


@pytest.fixture
def mock_client() -> MagicMock:
    """Stand-in for GeminiClient; configure generate_content per test."""
    return MagicMock()


@pytest.fixture
def gateway(mock_client) -> Gateway:
    return Gateway(client=mock_client)


@pytest.fixture
def mock_gateway() -> MagicMock:
    return MagicMock(spec=Gateway)


@pytest.fixture
def orchestrator(mock_gateway, session_store) -> Orchestrator:
    return Orchestrator(gateway=mock_gateway, session_store=session_store)
