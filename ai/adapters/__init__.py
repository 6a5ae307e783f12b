"""Adapters layer providing the generation contract, backends and registry.

The sub-modules are designed to be **plug-compatible** – every backend speaks
the same contract and the orchestrator never looks past it.
"""

from __future__ import annotations

from .types import (
    BackendDescriptor,
    BackendId,
    ContentType,
    Generation,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
)
from .base import BaseBackend, SupportsModelDiscovery
from .cache import CatalogCache
from .providers import (
    ClaudeBackend,
    GeminiBackend,
    OllamaBackend,
    OpenAIBackend,
    OpenRouterBackend,
    create_backend,
)
from .registry import BackendRegistry

__all__ = [
    "BackendDescriptor",
    "BackendId",
    "ContentType",
    "Generation",
    "GenerationOptions",
    "GenerationRequest",
    "GenerationResult",
    "BaseBackend",
    "SupportsModelDiscovery",
    "CatalogCache",
    "GeminiBackend",
    "OpenAIBackend",
    "ClaudeBackend",
    "OpenRouterBackend",
    "OllamaBackend",
    "create_backend",
    "BackendRegistry",
]
