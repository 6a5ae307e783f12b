"""Typed feasibility-study sections built on top of the orchestrator.

Each section asks the orchestrator for content and, for the structured ones,
pulls the first JSON block out of the answer. Whenever generation fails or the
answer does not validate, a locally built section is returned so the study
wizard always has something to render.
"""
from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from ai.adapters.types import ContentType, GenerationOptions
from ai.orchestrator import AIOrchestrator
from core.logging import logger

__all__ = [
    "ProjectBrief",
    "StudyProfile",
    "MarketAnalysis",
    "Level",
    "RiskItem",
    "Verdict",
    "Recommendation",
    "StudyContentService",
]

NOT_SPECIFIED = "غير محدد"
WEAK_MARKET = "ضعيف"
HIGH_RISK = "عالي"

_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")

T = TypeVar("T")


class _CamelModel(BaseModel):
    # The wizard and the prompts both use camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectBrief(_CamelModel):
    name: str
    description: str = ""
    industry: str = ""
    target_market: Optional[str] = None
    project_idea: Optional[str] = None
    objectives: Optional[str] = None
    location: Optional[str] = None
    initial_investment: Optional[float] = None
    project_type: Optional[str] = None


class StudyProfile(_CamelModel):
    project_name: str
    financial_viability: bool
    market_potential: str
    risk_level: str
    roi: Optional[float] = None
    payback_period: Optional[float] = None


class MarketAnalysis(_CamelModel):
    market_size: str
    growth_rate: str
    key_trends: List[str]
    opportunities: List[str]
    challenges: List[str]


class Level(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskItem(_CamelModel):
    category: str
    description: str
    probability: Level
    impact: Level
    mitigation: str
    contingency: str


class Verdict(str, Enum):
    PROCEED = "proceed"
    PROCEED_WITH_CAUTION = "proceed_with_caution"
    NOT_RECOMMENDED = "not_recommended"


class Recommendation(_CamelModel):
    overall_recommendation: Verdict
    reasoning: str
    key_recommendations: List[str]
    next_steps: List[str]
    conditions: Optional[List[str]] = None


class StudyContentService:
    """Generates the four AI-assisted sections of a feasibility study."""

    def __init__(self, orchestrator: AIOrchestrator, backend_id: Optional[str] = None):
        self._orchestrator = orchestrator
        self._backend_id = backend_id

    async def executive_summary(self, brief: ProjectBrief) -> str:
        prompt = f"""
اكتب ملخص تنفيذي شامل لمشروع باللغة العربية بناءً على البيانات التالية:

اسم المشروع: {brief.name}
الوصف: {brief.description}
الصناعة: {brief.industry}
السوق المستهدف: {brief.target_market or NOT_SPECIFIED}
فكرة المشروع: {brief.project_idea or NOT_SPECIFIED}
الأهداف: {brief.objectives or NOT_SPECIFIED}

يجب أن يتضمن الملخص التنفيذي:
1. نظرة عامة على المشروع
2. الأهداف الرئيسية
3. السوق المستهدف والفرص
4. المزايا التنافسية المتوقعة
5. ملخص النتائج المالية المتوقعة
6. التوصية النهائية

اكتب بطريقة مهنية ومقنعة، واستخدم اللغة العربية الفصحى.
"""
        text = await self._generate(prompt, ContentType.EXECUTIVE_SUMMARY)
        return text if text is not None else fallback_executive_summary(brief)

    async def market_analysis(self, brief: ProjectBrief) -> MarketAnalysis:
        prompt = f"""
قم بإعداد تحليل سوق شامل لمشروع باللغة العربية:

اسم المشروع: {brief.name}
الصناعة: {brief.industry}
السوق المستهدف: {brief.target_market or NOT_SPECIFIED}
الموقع: {brief.location or NOT_SPECIFIED}

أريد منك تحليل مفصل يشمل:
1. حجم السوق المتوقع (بالأرقام إن أمكن)
2. معدل النمو السنوي
3. الاتجاهات الرئيسية في السوق (5 نقاط)
4. الفرص المتاحة (5 نقاط)
5. التحديات والعوائق (5 نقاط)

قدم الإجابة بتنسيق JSON باللغة العربية كما يلي:
{{
  "marketSize": "حجم السوق",
  "growthRate": "معدل النمو",
  "keyTrends": ["اتجاه 1", "اتجاه 2"],
  "opportunities": ["فرصة 1", "فرصة 2"],
  "challenges": ["تحدي 1", "تحدي 2"]
}}
"""
        text = await self._generate(prompt, ContentType.MARKET_ANALYSIS)
        parsed = _parse_json(text, _OBJECT_RE, MarketAnalysis)
        return parsed if parsed is not None else fallback_market_analysis()

    async def risk_assessment(self, brief: ProjectBrief) -> List[RiskItem]:
        investment = brief.initial_investment if brief.initial_investment is not None else NOT_SPECIFIED
        prompt = f"""
قم بتحليل المخاطر المحتملة لمشروع:

اسم المشروع: {brief.name}
الصناعة: {brief.industry}
الاستثمار المبدئي: {investment}
نوع المشروع: {brief.project_type or NOT_SPECIFIED}

أريد تحليل شامل للمخاطر يشمل:
1. المخاطر المالية
2. المخاطر التقنية
3. المخاطر التشغيلية
4. مخاطر السوق
5. المخاطر التنظيمية

لكل خطر، حدد:
- الفئة (category)
- الوصف (description)
- الاحتمالية (probability: low/medium/high)
- التأثير (impact: low/medium/high)
- استراتيجية التخفيف (mitigation)
- الخطة البديلة (contingency)

قدم الإجابة كمصفوفة JSON باللغة العربية.
"""
        text = await self._generate(prompt, ContentType.RISK_ASSESSMENT)
        parsed = _parse_json(text, _ARRAY_RE, List[RiskItem])
        return parsed if parsed else fallback_risk_assessment()

    async def recommendations(self, profile: StudyProfile) -> Recommendation:
        roi = profile.roi if profile.roi is not None else NOT_SPECIFIED
        payback = profile.payback_period if profile.payback_period is not None else NOT_SPECIFIED
        prompt = f"""
قم بتقديم توصية نهائية بناءً على دراسة الجدوى:

اسم المشروع: {profile.project_name}
الجدوى المالية: {'مجدي' if profile.financial_viability else 'غير مجدي'}
إمكانات السوق: {profile.market_potential}
مستوى المخاطر: {profile.risk_level}
العائد على الاستثمار: {roi}%
فترة الاسترداد: {payback} سنة

قدم توصية شاملة تشمل:
1. التوصية العامة (overallRecommendation: proceed/proceed_with_caution/not_recommended)
2. التبرير المفصل (reasoning)
3. التوصيات الرئيسية (keyRecommendations: 5-7 نقاط)
4. الخطوات التالية المقترحة (nextSteps: 5 خطوات)
5. الشروط والاعتبارات إن وجدت (conditions)

قدم الإجابة بتنسيق JSON باللغة العربية.
"""
        text = await self._generate(prompt, ContentType.RECOMMENDATIONS)
        parsed = _parse_json(text, _OBJECT_RE, Recommendation)
        return parsed if parsed is not None else fallback_recommendations(profile)

    async def generate_section(
        self, content_type: Union[ContentType, str], data: Dict[str, Any]
    ) -> Union[str, Dict[str, Any], List[Dict[str, Any]]]:
        """Dispatch on content type and return a JSON-ready section."""
        try:
            content_type = ContentType(content_type)
        except ValueError:
            raise ValueError(f"نوع غير مدعوم من المحتوى: {content_type}") from None

        if content_type is ContentType.EXECUTIVE_SUMMARY:
            return await self.executive_summary(ProjectBrief.model_validate(data))
        if content_type is ContentType.MARKET_ANALYSIS:
            analysis = await self.market_analysis(ProjectBrief.model_validate(data))
            return analysis.model_dump(by_alias=True, mode="json")
        if content_type is ContentType.RISK_ASSESSMENT:
            risks = await self.risk_assessment(ProjectBrief.model_validate(data))
            return [risk.model_dump(by_alias=True, mode="json") for risk in risks]
        recommendation = await self.recommendations(StudyProfile.model_validate(data))
        return recommendation.model_dump(by_alias=True, mode="json", exclude_none=True)

    async def _generate(self, prompt: str, content_type: ContentType) -> Optional[str]:
        result = await self._orchestrator.generate_content(
            prompt.strip(),
            GenerationOptions(content_type=content_type),
            self._backend_id,
        )
        if not result.success:
            logger.warning(f"{content_type.value} generation failed, using local fallback section")
            return None
        return result.content


def _parse_json(text: Optional[str], pattern: "re.Pattern[str]", model: Type[T]) -> Optional[T]:
    if text is None:
        return None
    match = pattern.search(text)
    if not match:
        logger.warning("Generated content contained no JSON block")
        return None
    try:
        return TypeAdapter(model).validate_python(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Generated JSON did not match the expected shape: {e}")
        return None


# --- Local fallback sections ---

def fallback_executive_summary(brief: ProjectBrief) -> str:
    return f"""
## الملخص التنفيذي لمشروع {brief.name}

### نظرة عامة
يهدف مشروع {brief.name} في قطاع {brief.industry or NOT_SPECIFIED} إلى تقديم حلول مبتكرة تلبي احتياجات السوق المتنامية. يتميز المشروع بموقعه الاستراتيجي وفهمه العميق لمتطلبات العملاء.

### الأهداف الرئيسية
- تحقيق حصة سوقية تنافسية في قطاع {brief.industry or NOT_SPECIFIED}
- تقديم خدمات عالية الجودة تلبي توقعات العملاء
- بناء علامة تجارية قوية ومعترف بها
- تحقيق الاستدامة المالية والتشغيلية

### السوق المستهدف والفرص
يستهدف المشروع {brief.target_market or 'قطاعات متنوعة من السوق'} مع التركيز على الجودة والابتكار. تشير الدراسات إلى نمو مستمر في هذا القطاع.

### المزايا التنافسية
- الخبرة والكفاءة في المجال
- التقنيات المتطورة
- فريق عمل مؤهل ومتخصص
- نموذج عمل مرن وقابل للتطوير

### التوقعات المالية
تشير التحليلات الأولية إلى إمكانية تحقيق عوائد مجزية خلال السنوات الأولى من التشغيل، مع تحسن مستمر في الأداء المالي.

### التوصية النهائية
بناءً على التحليل الشامل، نوصي بالمضي قدماً في تنفيذ المشروع مع مراعاة خطة إدارة المخاطر المقترحة.
""".strip()


def fallback_market_analysis() -> MarketAnalysis:
    return MarketAnalysis(
        market_size="500 مليون ريال سعودي",
        growth_rate="12% سنوياً",
        key_trends=[
            "تزايد الطلب على الحلول الرقمية",
            "نمو الاستثمار في القطاعات الناشئة",
            "التوجه نحو الاستدامة البيئية",
            "زيادة الاعتماد على التقنيات المتطورة",
            "تطور سلوك المستهلكين وتفضيلاتهم",
        ],
        opportunities=[
            "دخول أسواق جديدة غير مستغلة",
            "تطوير شراكات استراتيجية",
            "الاستفادة من برامج الدعم الحكومية",
            "تطبيق تقنيات الذكاء الاصطناعي",
            "التوسع في الأسواق الإقليمية",
        ],
        challenges=[
            "المنافسة الشديدة من الشركات الكبيرة",
            "تقلبات الأسعار في السوق",
            "صعوبة الحصول على التمويل",
            "التحديات التنظيمية والقانونية",
            "نقص في الكوادر المتخصصة",
        ],
    )


def fallback_risk_assessment() -> List[RiskItem]:
    return [
        RiskItem(
            category="مالية",
            description="تأخير في الحصول على التمويل المطلوب",
            probability=Level.MEDIUM,
            impact=Level.HIGH,
            mitigation="تنويع مصادر التمويل والتخطيط المسبق",
            contingency="خطة تمويل بديلة من مصادر متعددة",
        ),
        RiskItem(
            category="تقنية",
            description="مشاكل في تطبيق التقنيات المطلوبة",
            probability=Level.LOW,
            impact=Level.MEDIUM,
            mitigation="التدريب المكثف واختيار تقنيات مجربة",
            contingency="فريق دعم تقني متخصص",
        ),
        RiskItem(
            category="تشغيلية",
            description="صعوبة في إيجاد الكوادر المناسبة",
            probability=Level.MEDIUM,
            impact=Level.MEDIUM,
            mitigation="برامج التدريب والتطوير المستمر",
            contingency="التعاقد مع شركات استشارية متخصصة",
        ),
        RiskItem(
            category="السوق",
            description="تغيير في طلب السوق أو تفضيلات العملاء",
            probability=Level.MEDIUM,
            impact=Level.HIGH,
            mitigation="دراسة مستمرة للسوق ومرونة في التكيف",
            contingency="تطوير منتجات وخدمات بديلة",
        ),
    ]


def fallback_recommendations(profile: StudyProfile) -> Recommendation:
    viable = profile.financial_viability and profile.market_potential != WEAK_MARKET
    high_risk = profile.risk_level == HIGH_RISK

    if not viable:
        verdict = Verdict.NOT_RECOMMENDED
        outlook = "نجد أن المشروع يواجه تحديات كبيرة قد تعيق نجاحه في الظروف الحالية."
    elif high_risk:
        verdict = Verdict.PROCEED_WITH_CAUTION
        outlook = "نجد أن المشروع يحمل إمكانيات نجاح جيدة مع ضرورة أخذ الحيطة والحذر من المخاطر المحددة."
    else:
        verdict = Verdict.PROCEED
        outlook = "نجد أن المشروع يحمل إمكانيات نجاح جيدة مع مؤشرات إيجابية قوية."

    reasoning = (
        f"بناءً على التحليل الشامل لمشروع {profile.project_name}، والذي يشمل الدراسة المالية "
        f"والسوقية وتقييم المخاطر، {outlook}"
    )

    if viable:
        key_recommendations = [
            "وضع خطة عمل تفصيلية مرحلية",
            "تأمين التمويل اللازم من مصادر متنوعة",
            "بناء فريق عمل متخصص وكفء",
            "تطوير استراتيجية تسويقية شاملة",
            "وضع نظام مراقبة الأداء والجودة",
            "إنشاء خطة شاملة لإدارة المخاطر",
            "التحديث المستمر للدراسات والتقييمات",
        ]
        next_steps = [
            "إعداد خطة العمل التفصيلية",
            "بدء إجراءات الحصول على التراخيص",
            "تأمين مصادر التمويل المطلوبة",
            "تشكيل فريق الإدارة والتشغيل",
            "البدء في المراحل الأولى للتنفيذ",
        ]
    else:
        key_recommendations = [
            "إعادة النظر في نموذج العمل المقترح",
            "تقليل التكاليف والاستثمار المبدئي",
            "البحث عن شراكات استراتيجية",
            "تأجيل المشروع حتى تحسن ظروف السوق",
            "دراسة بدائل وأسواق أخرى",
        ]
        next_steps = [
            "مراجعة شاملة لنموذج العمل",
            "دراسة خيارات التطوير والتحسين",
            "البحث عن فرص استثمارية بديلة",
            "إعادة تقييم السوق والظروف",
            "استشارة خبراء إضافيين في المجال",
        ]

    conditions = None
    if high_risk:
        conditions = [
            "وضع خطة شاملة لإدارة المخاطر العالية",
            "تأمين احتياطي مالي إضافي 20% من التكلفة",
            "المراقبة الدورية للمؤشرات الرئيسية",
            "وضع خطط بديلة لكل سيناريو محتمل",
        ]

    return Recommendation(
        overall_recommendation=verdict,
        reasoning=reasoning,
        key_recommendations=key_recommendations,
        next_steps=next_steps,
        conditions=conditions,
    )
