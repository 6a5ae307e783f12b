"""Shared request/response shapes for every generation backend."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ContentType(str, Enum):
    """Feasibility-study sections a caller can ask for; selects the system prompt."""
    EXECUTIVE_SUMMARY = "executive_summary"
    MARKET_ANALYSIS = "market_analysis"
    RISK_ASSESSMENT = "risk_assessment"
    RECOMMENDATIONS = "recommendations"


class BackendId(str, Enum):
    """Built-in backends, listed in default fallback priority."""
    GEMINI = "gemini"
    OPENAI = "openai"
    CLAUDE = "claude"
    OPENROUTER = "openrouter"
    OLLAMA = "ollama"


class GenerationOptions(BaseModel):
    """Per-call knobs. Every field is optional; None means "use the backend default"."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(None, gt=0)
    model: Optional[str] = None
    content_type: Optional[ContentType] = None


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    options: GenerationOptions = field(default_factory=GenerationOptions)


@dataclass(frozen=True)
class Generation:
    """Outcome of one backend attempt.

    ``ok=False`` always carries non-empty degraded text in ``content`` and the
    failure reason in ``error``.
    """
    content: str
    ok: bool = True
    error: Optional[str] = None


@dataclass(frozen=True)
class GenerationResult:
    """What the orchestrator hands back to callers."""
    content: str
    used_backend: Optional[str]
    success: bool


@dataclass(frozen=True)
class BackendDescriptor:
    id: str
    display_name: str
    available: bool
