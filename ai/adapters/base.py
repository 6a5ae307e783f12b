"""Abstract generation backend and the optional model-discovery capability."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

import httpx

from ai.adapters.types import Generation, GenerationOptions
from ai.degraded import degraded_content
from ai.prompts import PromptTemplates
from core.config import BackendConfig
from core.errors import BackendError
from core.logging import logger

__all__ = [
    "DEFAULT_TEMPERATURE",
    "DEFAULT_MAX_TOKENS",
    "RECOVERABLE_ERRORS",
    "BaseBackend",
    "SupportsModelDiscovery",
]

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000

# Transport, status and response-shape failures an adapter turns into degraded content
RECOVERABLE_ERRORS = (
    httpx.HTTPError,
    httpx.InvalidURL,
    BackendError,
    ValueError,
    KeyError,
    IndexError,
    TypeError,
    AttributeError,
)


@runtime_checkable
class SupportsModelDiscovery(Protocol):
    """Backends that can ask the remote service which models are deployed."""

    async def list_models(self) -> List[str]:
        ...


class BaseBackend(ABC):
    """Base class for generation backends.

    Subclasses own their request envelope, auth headers and response parsing;
    this class only carries configuration, the shared prompt templates and the
    degraded-content helper.
    """

    backend_id: str = ""
    degraded_hint: str = "يرجى التحقق من إعدادات API"

    def __init__(self, config: BackendConfig, templates: Optional[PromptTemplates] = None):
        self.config = config
        self.templates = templates or PromptTemplates()

    @property
    def display_name(self) -> str:
        return self.config.display_name

    @property
    def base_url(self) -> str:
        return self.config.base_url.rstrip("/")

    @property
    def default_model(self) -> str:
        return self.config.default_model

    @property
    def timeout(self) -> float:
        return self.config.timeout

    @property
    def static_models(self) -> List[str]:
        """Known model names, for backends without a runtime catalog."""
        return list(self.config.models)

    @abstractmethod
    def is_available(self) -> bool:
        """Configuration-only check. Never touches the network."""

    @abstractmethod
    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> Generation:
        """One attempt against the remote service. Must not raise for remote failures."""

    # ------------------------------------------------------------------
    def _model(self, options: GenerationOptions) -> str:
        return options.model or self.default_model

    @staticmethod
    def _temperature(options: GenerationOptions) -> float:
        return DEFAULT_TEMPERATURE if options.temperature is None else options.temperature

    @staticmethod
    def _max_tokens(options: GenerationOptions) -> int:
        return options.max_tokens or DEFAULT_MAX_TOKENS

    def _require_text(self, text: Optional[str]) -> str:
        if not isinstance(text, str) or not text.strip():
            raise BackendError(self.backend_id, "response contained no generated text")
        return text

    def _degraded(self, options: GenerationOptions, reason: str) -> Generation:
        logger.warning(f"{self.display_name} returned degraded content: {reason}")
        return Generation(
            content=degraded_content(options.content_type, self.display_name, self.degraded_hint),
            ok=False,
            error=reason,
        )
