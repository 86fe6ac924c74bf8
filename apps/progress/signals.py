# apps/progress/signals.py
import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.points import ledger, rules
from apps.points.exceptions import RuleNotFound
from apps.points.models import PointSourceType, RuleKey

from .models import Attendance, AttendanceStatus, Recitation, RecitationQuality

logger = logging.getLogger(__name__)

QUALITY_RULE_KEYS = {
    RecitationQuality.EXCELLENT: RuleKey.RECITATION_EXCELLENT,
    RecitationQuality.VERY_GOOD: RuleKey.RECITATION_VERY_GOOD,
    RecitationQuality.GOOD: RuleKey.RECITATION_GOOD,
    RecitationQuality.ACCEPTABLE: RuleKey.RECITATION_ACCEPTABLE,
    RecitationQuality.POOR: RuleKey.RECITATION_POOR,
}

ATTENDANCE_RULE_KEYS = {
    AttendanceStatus.PRESENT: (RuleKey.ATTENDANCE_PRESENT, RuleKey.ATTENDANCE_ON_TIME),
    AttendanceStatus.LATE: (RuleKey.ATTENDANCE_LATE,),
    AttendanceStatus.ABSENT: (RuleKey.ATTENDANCE_ABSENT,),
    AttendanceStatus.EXCUSED: (),
}


def award_outcome(student_id, tenant_id, source_type, key, session_id):
    """
    منح نقاط نتيجة واحدة. القاعدة الغائبة أو غير المفعّلة أو التي قيمتها صفر
    تعني "لا نقاط لهذه النتيجة": تُسجّل في السجل ولا تُرفع كخطأ.
    """
    try:
        rule = rules.resolve(tenant_id, key)
    except RuleNotFound:
        logger.warning("No active rule %s for tenant %s; no points for student %s",
                       key, tenant_id, student_id)
        return None
    if rule.points == 0:
        return None
    return ledger.award(student_id, tenant_id, source_type, key=key, session_id=session_id)


@receiver(post_save, sender=Recitation)
def award_recitation_points(sender, instance, created, **kwargs):
    """
    منح نقاط التسميع حسب الجودة عند تسجيل تسميع جديد فقط.
    """
    if not created or kwargs.get("raw"):
        return
    key = QUALITY_RULE_KEYS[RecitationQuality(instance.quality)]
    txn = award_outcome(instance.student_id, instance.tenant_id,
                        PointSourceType.RECITATION, key, instance.session_id)
    instance.point_transactions = [txn] if txn else []


@receiver(post_save, sender=Attendance)
def award_attendance_points(sender, instance, created, **kwargs):
    """
    منح نقاط الحضور (أو خصم الغياب) عند أول تسجيل للحضور في الجلسة.
    - حاضر => نقاط الحضور + نقاط الالتزام بالوقت
    - متأخر => نقاط التأخر
    - غائب => خصم الغياب
    - بعذر => لا شيء
    """
    if not created or kwargs.get("raw"):
        return
    transactions = []
    for key in ATTENDANCE_RULE_KEYS[AttendanceStatus(instance.status)]:
        txn = award_outcome(instance.student_id, instance.tenant_id,
                            PointSourceType.ATTENDANCE, key, instance.session_id)
        if txn:
            transactions.append(txn)
    instance.point_transactions = transactions
