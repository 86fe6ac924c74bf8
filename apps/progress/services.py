"""
نقاط الدخول للأحداث: تسميع، حضور، نقاط يدوية، إنهاء اختبار.
تسجيل الواقعة ومنح نقاطها وحدة واحدة؛ أي خطأ غير "قاعدة غائبة" يلغي الاثنين.
"""
import logging
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.exams import services as exam_services
from apps.points import ledger

from .models import Attendance, Recitation

logger = logging.getLogger(__name__)


@dataclass
class BulkRecitationResult:
    recitations: list = field(default_factory=list)
    total_points_awarded: int = 0

    @property
    def page_count(self):
        return len(self.recitations)


def _points_of(instance):
    return sum(txn.amount for txn in getattr(instance, "point_transactions", []))


@transaction.atomic
def record_recitation(student_id, tenant_id, session_id, page_number, quality, recitation_type,
                      mistakes_count=0, surah_id=None, notes=None):
    recitation = Recitation.objects.create(
        tenant_id=tenant_id,
        student_id=student_id,
        session_id=session_id,
        page_number=page_number,
        quality=quality,
        type=recitation_type,
        mistakes_count=mistakes_count,
        surah_id=surah_id,
        notes=notes,
    )
    return recitation


@transaction.atomic
def record_bulk_recitation(student_id, tenant_id, session_id, details):
    """
    تسجيل عدة صفحات دفعة واحدة، لكل صفحة جودتها ونقاطها.
    details: قائمة dict فيها page_number و quality و type (و surah_id اختيارياً).
    """
    if not details:
        raise ValidationError("يجب تحديد صفحة واحدة على الأقل.")

    result = BulkRecitationResult()
    for detail in details:
        recitation = record_recitation(
            student_id,
            tenant_id,
            session_id,
            detail["page_number"],
            detail["quality"],
            detail["type"],
            surah_id=detail.get("surah_id"),
        )
        result.recitations.append(recitation)
        result.total_points_awarded += _points_of(recitation)

    logger.info("Recorded %d page(s) for student %s in session %s (+%d points)",
                result.page_count, student_id, session_id, result.total_points_awarded)
    return result


@transaction.atomic
def record_attendance(student_id, tenant_id, session_id, status):
    return Attendance.objects.create(
        tenant_id=tenant_id,
        student_id=student_id,
        session_id=session_id,
        status=status,
    )


def award_manual_points(student_id, tenant_id, amount, reason, session_id, teacher_id):
    return ledger.add_manual_points(student_id, tenant_id, amount, reason, session_id, teacher_id)


def complete_exam(exam_id, config=None):
    completion = exam_services.complete(exam_id, config=config)
    if completion.reward_pending:
        logger.warning("Exam %s completed; pass reward pending reconciliation", exam_id)
    return completion
