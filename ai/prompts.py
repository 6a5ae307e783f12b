"""System prompts for feasibility-study content types.

Every backend prepends one of these role instructions to the caller's prompt,
either as a dedicated system field or concatenated into the prompt body.
"""
from __future__ import annotations

from typing import Dict, Optional

from ai.adapters.types import ContentType

__all__ = ["SYSTEM_PROMPTS", "PromptTemplates"]


SYSTEM_PROMPTS: Dict[ContentType, str] = {
    ContentType.EXECUTIVE_SUMMARY: (
        "أنت خبير في إعداد دراسات الجدوى وتخصص في كتابة الملخصات التنفيذية الاحترافية.\n"
        "اكتب باللغة العربية بأسلوب احترافي ومقنع. ركز على الأهداف والفرص والقيمة المضافة للمشروع."
    ),
    ContentType.MARKET_ANALYSIS: (
        "أنت محلل سوق محترف متخصص في دراسة الأسواق والمنافسة.\n"
        "قم بتحليل السوق المستهدف وحدد الفرص والتحديات والاتجاهات الرئيسية باللغة العربية."
    ),
    ContentType.RISK_ASSESSMENT: (
        "أنت خبير في تقييم المخاطر التجارية والمالية.\n"
        "حدد وقيم المخاطر المحتملة واقترح استراتيجيات للتخفيف منها باللغة العربية."
    ),
    ContentType.RECOMMENDATIONS: (
        "أنت مستشار تجاري محترف.\n"
        "قدم توصيات عملية وقابلة للتنفيذ بناءً على تحليل دراسة الجدوى باللغة العربية."
    ),
}


class PromptTemplates:
    """Stateless content-type → system prompt resolver shared by all backends."""

    def __init__(self, prompts: Optional[Dict[ContentType, str]] = None) -> None:
        self._prompts = dict(prompts or SYSTEM_PROMPTS)

    def system_prompt(self, content_type: Optional[ContentType]) -> Optional[str]:
        """Return the role instruction for ``content_type``, or None when no type is given."""
        if content_type is None:
            return None
        return self._prompts[ContentType(content_type)]

    def compose(self, prompt: str, content_type: Optional[ContentType]) -> str:
        """Prompt body for backends without a separate system field."""
        system = self.system_prompt(content_type)
        if not system:
            return prompt
        return f"{system}\n\n{prompt}"
