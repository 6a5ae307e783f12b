"""Hand-written placeholder study content returned when a backend cannot answer.

This is terminal content for a failed attempt, not a cache: nothing here is
derived from earlier responses.
"""
from __future__ import annotations

from typing import Optional

from ai.adapters.types import ContentType

__all__ = [
    "NO_BACKEND_MESSAGE",
    "GENERATION_FAILED_MESSAGE",
    "degraded_content",
]

NO_BACKEND_MESSAGE = "لا توجد مقدمات AI متاحة. يرجى التحقق من إعدادات API."
GENERATION_FAILED_MESSAGE = "فشل في توليد المحتوى. يرجى المحاولة مرة أخرى."


_EXECUTIVE_SUMMARY = """
## الملخص التنفيذي

### نظرة عامة على المشروع
يهدف هذا المشروع إلى تقديم حلول مبتكرة تلبي احتياجات السوق المتنامية وتحقق قيمة مضافة حقيقية للعملاء.

### الأهداف الاستراتيجية
- تحقيق حصة سوقية تنافسية خلال السنوات الثلاث الأولى
- بناء علامة تجارية قوية ومعترف بها محلياً وإقليمياً
- تحقيق الاستدامة المالية والربحية على المدى الطويل

### الفرص السوقية
تشير الدراسات الأولية إلى وجود فرص واعدة في السوق يمكن استغلالها من خلال تقديم منتجات وخدمات متميزة.

### التوقعات المالية
تظهر التوقعات المالية إمكانية تحقيق عائد استثمار إيجابي خلال السنة الثانية مع نمو مستمر في الإيرادات.
""".strip()

_MARKET_ANALYSIS = """
## تحليل السوق

### حجم السوق المستهدف
يقدر حجم السوق المستهدف بحوالي 500 مليون ريال سعودي سنوياً، مع معدل نمو سنوي يبلغ 12%.

### الاتجاهات الرئيسية
- تزايد الطلب على الحلول الرقمية المبتكرة
- نمو الوعي بأهمية الجودة والخدمة المتميزة
- التحول نحو الاستدامة البيئية والاجتماعية

### الفرص السوقية
- دخول قطاعات جديدة غير مستغلة بالكامل
- الاستفادة من برامج الدعم الحكومية
- تطوير شراكات استراتيجية مع الشركات الرائدة

### التحديات المتوقعة
- المنافسة الشديدة من اللاعبين الكبار
- التحديات التنظيمية والقانونية
- تقلبات الأسعار في السوق العالمية
""".strip()

_RISK_ASSESSMENT = """
## تقييم المخاطر

### المخاطر المالية
- **احتمالية**: متوسطة | **التأثير**: عالي
- **الوصف**: تأخير في الحصول على التمويل المطلوب
- **استراتيجية التخفيف**: تنويع مصادر التمويل وإعداد خطط بديلة

### المخاطر السوقية
- **احتمالية**: منخفضة | **التأثير**: متوسط
- **الوصف**: تغيير مفاجئ في احتياجات السوق
- **استراتيجية التخفيف**: مراقبة مستمرة للسوق والمرونة في التكيف

### المخاطر التقنية
- **احتمالية**: منخفضة | **التأثير**: متوسط
- **الوصف**: مشاكل في التقنيات المستخدمة
- **استراتيجية التخفيف**: اختيار تقنيات مجربة وفريق تقني مؤهل

### التوصيات العامة
- وضع خطة شاملة لإدارة المخاطر
- مراجعة دورية لتقييم المخاطر الجديدة
- تطوير خطط طوارئ للمخاطر عالية التأثير
""".strip()

_RECOMMENDATIONS = """
## التوصيات والخطة التنفيذية

### التوصية العامة
بناءً على التحليل الشامل لدراسة الجدوى، نوصي بالمضي قدماً في تنفيذ المشروع مع اتخاذ الاحتياطات اللازمة.

### التوصيات الرئيسية
1. **التمويل**: تأمين التمويل من مصادر متنوعة لتقليل المخاطر
2. **الفريق**: بناء فريق عمل متخصص ومتنوع الخبرات
3. **التسويق**: وضع استراتيجية تسويقية شاملة قبل الإطلاق
4. **التقنية**: اختيار تقنيات مجربة وقابلة للتطوير
5. **المراقبة**: إنشاء نظام مراقبة الأداء والمؤشرات

### الخطوات التالية
1. **المرحلة الأولى (1-3 أشهر)**: إعداد خطة العمل التفصيلية والحصول على التراخيص وتأمين التمويل الأولي
2. **المرحلة الثانية (3-6 أشهر)**: تشكيل الفريق الأساسي وبدء العمليات التشغيلية الأولية
3. **المرحلة الثالثة (6-12 شهر)**: الإطلاق التجريبي المحدود ثم التوسع التدريجي في السوق

### مؤشرات النجاح
- تحقيق التدفق النقدي الإيجابي خلال 18 شهر
- الوصول إلى 5% من الحصة السوقية المستهدفة
- تحقيق رضا العملاء بنسبة تزيد عن 85%
""".strip()

_BY_TYPE = {
    ContentType.EXECUTIVE_SUMMARY: _EXECUTIVE_SUMMARY,
    ContentType.MARKET_ANALYSIS: _MARKET_ANALYSIS,
    ContentType.RISK_ASSESSMENT: _RISK_ASSESSMENT,
    ContentType.RECOMMENDATIONS: _RECOMMENDATIONS,
}


def degraded_content(
    content_type: Optional[ContentType],
    backend_name: str,
    hint: str = "يرجى التحقق من إعدادات API",
) -> str:
    """Placeholder text for ``content_type``; untyped requests get a short notice naming the backend."""
    if content_type is not None:
        return _BY_TYPE[ContentType(content_type)]
    return f"محتوى افتراضي من {backend_name} - {hint}"
