import os
import sys
import tempfile
from pathlib import Path
from typing import Optional
from unittest.mock import AsyncMock, patch

import pytest

# Keep test runs from writing into the repository's logs/ directory
os.environ.setdefault("JADWA_LOG_DIR", tempfile.mkdtemp(prefix="jadwa-logs-"))

# Add project root to the path to allow imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import httpx

from ai.adapters.types import Generation

BACKEND_ENV_VARS = [
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "CLAUDE_API_KEY",
    "OPENROUTER_API_KEY",
    "OLLAMA_BASE_URL",
    "OLLAMA_MODEL",
    "DEFAULT_AI_PROVIDER",
    "AI_CONFIG_PATH",
    "APP_URL",
]


@pytest.fixture(autouse=True)
def clean_backend_env(monkeypatch):
    """Tests never see real credentials from the developer's shell."""
    for name in BACKEND_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_httpx_client():
    """Mock httpx.AsyncClient for API calls."""
    with patch("httpx.AsyncClient") as mock_client:
        mock_instance = AsyncMock()
        mock_instance.__aenter__.return_value = mock_instance
        mock_instance.__aexit__.return_value = None
        mock_client.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def make_response():
    """Build real httpx responses so raise_for_status behaves as in production."""
    def _make(status: int = 200, json_body=None, content: Optional[bytes] = None, method: str = "POST"):
        request = httpx.Request(method, "https://backend.test/endpoint")
        if content is not None:
            return httpx.Response(status, content=content, request=request)
        return httpx.Response(status, json=json_body, request=request)
    return _make


class FakeBackend:
    """Contract-shaped stand-in with call counting."""

    def __init__(self, name: str, available: bool = True, content: str = "", ok: bool = True,
                 raises: Optional[Exception] = None, models=None):
        self.display_name = name
        self.available = available
        self.static_models = list(models or [])
        if raises is not None:
            self.generate = AsyncMock(side_effect=raises)
        else:
            self.generate = AsyncMock(
                return_value=Generation(content=content or f"content from {name}", ok=ok,
                                        error=None if ok else "remote failure")
            )

    def is_available(self) -> bool:
        return self.available


@pytest.fixture
def fake_backend():
    return FakeBackend
