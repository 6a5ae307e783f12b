"""Generation orchestrator: backend resolution with one level of failover.

A call makes at most two backend attempts: the resolved backend, then the
first other available backend in registry priority order. There is no retry
loop and no backoff; callers re-trigger generation themselves.
"""
from __future__ import annotations

from typing import List, Optional

from ai.adapters.base import BaseBackend, SupportsModelDiscovery
from ai.adapters.cache import CatalogCache
from ai.adapters.providers import create_backend
from ai.adapters.registry import BackendRegistry
from ai.adapters.types import (
    BackendDescriptor,
    Generation,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
)
from ai.degraded import GENERATION_FAILED_MESSAGE, NO_BACKEND_MESSAGE
from ai.prompts import PromptTemplates
from core.config import AppSettings, BackendsConfig, get_settings, load_backends_config
from core.logging import logger

__all__ = ["AIOrchestrator", "build_orchestrator"]

TEST_PROMPT = "اختبار"


class AIOrchestrator:
    """Single entry point for content generation across all registered backends."""

    def __init__(self, registry: BackendRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> BackendRegistry:
        return self._registry

    @property
    def default_backend(self) -> str:
        return self._registry.default_backend_id

    def set_default_backend(self, backend_id: str) -> None:
        self._registry.set_default(backend_id)

    def list_backends(self) -> List[BackendDescriptor]:
        return self._registry.describe()

    async def generate_content(
        self,
        prompt: str,
        options: Optional[GenerationOptions] = None,
        backend_id: Optional[str] = None,
    ) -> GenerationResult:
        """Generate text, falling back once to another backend on failure.

        Never raises: every failure path ends in ``success=False`` with a
        readable Arabic message in ``content``.
        """
        request = GenerationRequest(prompt=prompt, options=options or GenerationOptions())
        target_id = backend_id or self._registry.default_backend_id
        backend = self._registry.get(target_id)

        if backend is None or not backend.is_available():
            substitute = self._registry.first_available()
            if substitute is None:
                logger.error("No generation backend is available")
                return GenerationResult(content=NO_BACKEND_MESSAGE, used_backend=None, success=False)
            logger.warning(f"Backend '{target_id}' is unavailable, using '{substitute[0]}' instead")
            target_id, backend = substitute

        generation = await self._attempt(target_id, backend, request)
        if generation.ok:
            return GenerationResult(content=generation.content, used_backend=target_id, success=True)

        fallback = self._registry.first_available(exclude=target_id)
        if fallback is None:
            logger.error(f"Generation with '{target_id}' failed and no fallback backend is available")
            return self._failure(generation, target_id)

        fallback_id, fallback_backend = fallback
        logger.warning(f"Generation with '{target_id}' failed ({generation.error}), falling back to '{fallback_id}'")
        generation = await self._attempt(fallback_id, fallback_backend, request)
        if generation.ok:
            return GenerationResult(content=generation.content, used_backend=fallback_id, success=True)

        logger.error(f"Fallback backend '{fallback_id}' also failed: {generation.error}")
        return self._failure(generation, fallback_id)

    async def test_backend(self, backend_id: str) -> bool:
        """Minimal live generation against one backend, for admin diagnostics."""
        backend = self._registry.get(backend_id)
        if backend is None or not backend.is_available():
            return False

        request = GenerationRequest(
            prompt=TEST_PROMPT,
            options=GenerationOptions(max_tokens=50, temperature=0.5),
        )
        generation = await self._attempt(backend_id, backend, request)
        return generation.ok and len(generation.content) > 0

    async def list_models_for(self, backend_id: str) -> List[str]:
        backend = self._registry.get(backend_id)
        if backend is None:
            return []

        if isinstance(backend, SupportsModelDiscovery):
            try:
                return list(await backend.list_models())
            except Exception:
                logger.exception(f"Model discovery for '{backend_id}' raised")
                return []

        return list(getattr(backend, "static_models", []))

    # ------------------------------------------------------------------
    async def _attempt(self, backend_id: str, backend: BaseBackend, request: GenerationRequest) -> Generation:
        # Backends convert remote failures themselves; this catches bugs in request construction
        try:
            generation = await backend.generate(request.prompt, request.options)
        except Exception as e:
            logger.exception(f"Backend '{backend_id}' raised during generation")
            return Generation(content=GENERATION_FAILED_MESSAGE, ok=False, error=f"{type(e).__name__}: {e}")

        if generation.ok and not generation.content.strip():
            return Generation(content=GENERATION_FAILED_MESSAGE, ok=False, error="empty content")
        return generation

    @staticmethod
    def _failure(generation: Generation, backend_id: str) -> GenerationResult:
        content = generation.content if generation.content.strip() else GENERATION_FAILED_MESSAGE
        return GenerationResult(content=content, used_backend=backend_id, success=False)


def build_orchestrator(
    settings: Optional[AppSettings] = None,
    config: Optional[BackendsConfig] = None,
) -> AIOrchestrator:
    """Composition root: every configured backend, in priority order, behind one orchestrator."""
    settings = settings or get_settings()
    config = config or load_backends_config(settings.AI_CONFIG_PATH)

    templates = PromptTemplates()
    catalog = CatalogCache(ttl_sec=config.catalog_ttl)
    registry = BackendRegistry(
        [
            (backend_id, create_backend(backend_id, settings, config, templates, catalog))
            for backend_id in config.priority
        ],
        default_backend_id=settings.DEFAULT_AI_PROVIDER,
    )

    available = [d.id for d in registry.describe() if d.available]
    logger.info(
        f"AI orchestrator ready: default='{registry.default_backend_id}', "
        f"available={available or 'none'}"
    )
    return AIOrchestrator(registry)
