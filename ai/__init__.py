"""AI module for feasibility-study content generation across multiple backends."""

from ai.adapters.types import ContentType, GenerationOptions, GenerationResult
from ai.degraded import NO_BACKEND_MESSAGE
from ai.orchestrator import AIOrchestrator, build_orchestrator
from core.errors import ConfigError
from core.logging import logger

__all__ = [
    "AIOrchestrator",
    "ContentType",
    "GenerationOptions",
    "GenerationResult",
    "build_orchestrator",
    "generate",
]

# Quick start entry point
async def generate(
    prompt: str,
    content_type: ContentType = None,
    orchestrator: AIOrchestrator = None,
) -> GenerationResult:
    """
    One-off generation with a freshly composed orchestrator.

    Args:
        prompt: The user prompt
        content_type: Optional study section, selects the system prompt
        orchestrator: Reuse an existing orchestrator instead of building one

    Returns:
        GenerationResult with the text and the backend that produced it.
        A broken backends config or settings yields the no-backend result
        instead of raising; call build_orchestrator() directly to see the error.
    """
    if orchestrator is None:
        try:
            orchestrator = build_orchestrator()
        except ConfigError as e:
            logger.error(f"Cannot build AI orchestrator: {e}")
            return GenerationResult(content=NO_BACKEND_MESSAGE, used_backend=None, success=False)
    return await orchestrator.generate_content(prompt, GenerationOptions(content_type=content_type))
