import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from .exceptions import RuleNotFound
from .models import PointRule, RuleKey

logger = logging.getLogger(__name__)

# القواعد الافتراضية لكل مسجد جديد: (المفتاح، الوصف، النقاط)
DEFAULT_RULES = [
    (RuleKey.RECITATION_EXCELLENT, "Points for excellent recitation with no mistakes", 5),
    (RuleKey.RECITATION_VERY_GOOD, "Points for very good recitation with few mistakes", 3),
    (RuleKey.RECITATION_GOOD, "Points for good recitation", 1),
    (RuleKey.RECITATION_ACCEPTABLE, "Points for acceptable recitation", 0),
    (RuleKey.RECITATION_POOR, "Points for poor recitation (encouragement only)", 0),
    (RuleKey.ATTENDANCE_PRESENT, "Points for being present in the session", 2),
    (RuleKey.ATTENDANCE_ON_TIME, "Bonus points for arriving on time", 1),
    (RuleKey.ATTENDANCE_LATE, "Points for attending late", 1),
    (RuleKey.ATTENDANCE_ABSENT, "Penalty for an unexcused absence", -1),
    (RuleKey.EXAM_PASSED, "Points for passing a juz exam", 10),
]


def resolve(tenant_id, key):
    """
    إرجاع القاعدة المفعّلة للمفتاح داخل المسجد، أو RuleNotFound.
    لا يوجد بحث عبر المساجد ولا قيم افتراضية ضمنية.
    """
    if not tenant_id or key not in RuleKey.values:
        raise RuleNotFound(tenant_id, key)
    try:
        return PointRule.objects.get(tenant_id=tenant_id, key=key, is_active=True)
    except PointRule.DoesNotExist:
        raise RuleNotFound(tenant_id, key) from None


def list_rules(tenant_id):
    return list(PointRule.objects.filter(tenant_id=tenant_id).order_by("key"))


def _check_points(key, points):
    if isinstance(points, bool) or not isinstance(points, int):
        raise ValidationError(
            {"points": f"نقاط القاعدة {key} يجب أن تكون عدداً صحيحاً (القيمة: {points!r})."},
            code="invalid_points",
        )


def update_rule(tenant_id, key, *, points=None, is_active=None, description=None):
    try:
        rule = PointRule.objects.get(tenant_id=tenant_id, key=key)
    except PointRule.DoesNotExist:
        raise RuleNotFound(tenant_id, key) from None

    if points is not None:
        _check_points(key, points)
        rule.points = points
    if is_active is not None:
        rule.is_active = bool(is_active)
    if description is not None:
        rule.description = description
    rule.full_clean()
    rule.save()
    logger.info("Updated point rule %s for tenant %s: %+d (active=%s)",
                key, tenant_id, rule.points, rule.is_active)
    return rule


@transaction.atomic
def bulk_update_points(tenant_id, points_by_key):
    """تعديل نقاط عدة قواعد دفعة واحدة؛ أي مفتاح غير موجود يلغي العملية كلها."""
    rules = {
        r.key: r
        for r in PointRule.objects.select_for_update().filter(
            tenant_id=tenant_id, key__in=list(points_by_key)
        )
    }
    for key in points_by_key:
        if key not in rules:
            raise RuleNotFound(tenant_id, key)

    updated = []
    for key, points in points_by_key.items():
        _check_points(key, points)
        rule = rules[key]
        rule.points = points
        rule.full_clean()
        rule.save(update_fields=["points", "updated_at"])
        updated.append(rule)
    logger.info("Bulk-updated %d point rule(s) for tenant %s", len(updated), tenant_id)
    return updated


def seed_default_rules(tenant_id):
    """إنشاء القواعد الافتراضية الناقصة فقط؛ لا يلمس القواعد المعدّلة."""
    created = 0
    for key, description, points in DEFAULT_RULES:
        _, was_created = PointRule.objects.get_or_create(
            tenant_id=tenant_id,
            key=key,
            defaults={"description": description, "points": points},
        )
        created += int(was_created)
    if created:
        logger.info("Seeded %d default point rule(s) for tenant %s", created, tenant_id)
    return created
