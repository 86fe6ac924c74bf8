"""
سجل النقاط (Ledger).

كل إضافة أو خصم أو إلغاء يمر عبر صف StudentAggregate الخاص بالطالب:
يُقفل الصف بـ select_for_update داخل transaction.atomic ثم يُعدّل المجموع
بتعبير F()، فتتسلسل العمليات على نفس الطالب ولا تتعطل بين طلاب مختلفين.
"""
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Sum
from django.db.models.functions import Abs
from django.utils import timezone

from . import rules
from .exceptions import AlreadyReversed, BudgetExceeded
from .models import ManualPointsBudget, PointSourceType, PointTransaction, RuleKey, StudentAggregate

logger = logging.getLogger(__name__)

MANUAL_SOURCE_TYPES = (PointSourceType.MANUAL_REWARD, PointSourceType.MANUAL_PENALTY)
REASON_MAX_LENGTH = PointTransaction._meta.get_field("reason").max_length


def _lock_aggregate(tenant_id, student_id):
    # يجب أن تُستدعى داخل transaction.atomic
    aggregate, _ = StudentAggregate.objects.select_for_update().get_or_create(
        tenant_id=tenant_id, student_id=student_id
    )
    return aggregate


def _apply_delta(aggregate, delta):
    StudentAggregate.objects.filter(pk=aggregate.pk).update(
        total_points=F("total_points") + delta, updated_at=timezone.now()
    )


def _check_amount(source_type, amount):
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError("قيمة النقاط يجب أن تكون عدداً صحيحاً.", code="invalid_amount")
    if source_type == PointSourceType.MANUAL_REWARD and amount < 0:
        raise ValidationError("المكافأة اليدوية لا تكون سالبة.", code="invalid_amount")
    if source_type == PointSourceType.MANUAL_PENALTY and amount >= 0:
        raise ValidationError("الخصم اليدوي يجب أن يكون سالباً.", code="invalid_amount")


def award(student_id, tenant_id, source_type, key=None, amount=None, reason="",
          session_id=None, awarded_by_id=None):
    """
    إضافة حركة نقاط وتحديث مجموع الطالب كوحدة واحدة.
    يحدد المبلغ إما مفتاح قاعدة (key) أو قيمة صريحة (amount)، وليس الاثنين.
    """
    if source_type not in PointSourceType.values:
        raise ValidationError(f"مصدر نقاط غير معروف: {source_type}", code="invalid_source")
    if (key is None) == (amount is None):
        raise ValidationError("حدد مفتاح القاعدة أو قيمة النقاط، وليس الاثنين.", code="amount_source")
    if not student_id or not tenant_id:
        raise ValidationError("الطالب والمسجد مطلوبان.", code="required")

    if key is not None:
        # الحل قبل أي كتابة: فشل القاعدة يعني عدم حدوث أي تغيير
        rule = rules.resolve(tenant_id, key)
        if RuleKey(rule.key).source_type != source_type:
            raise ValidationError(
                f"المفتاح {rule.key} لا يخص المصدر {source_type}.", code="source_mismatch"
            )
        amount = rule.points
        reason = reason or rule.description
    _check_amount(source_type, amount)
    if not reason:
        raise ValidationError("سبب الحركة مطلوب.", code="required")
    if len(reason) > REASON_MAX_LENGTH:
        raise ValidationError(
            f"سبب الحركة أطول من {REASON_MAX_LENGTH} حرفاً.", code="max_length"
        )

    with transaction.atomic():
        aggregate = _lock_aggregate(tenant_id, student_id)
        txn = PointTransaction.objects.create(
            tenant_id=tenant_id,
            student_id=student_id,
            amount=amount,
            reason=reason,
            source_type=source_type,
            rule_key=key,
            session_id=session_id,
            awarded_by_id=awarded_by_id,
        )
        _apply_delta(aggregate, amount)

    logger.info("Awarded %+d to student %s (tenant %s, %s, txn %s)",
                amount, student_id, tenant_id, source_type, txn.pk)
    return txn


def reverse(transaction_id):
    """إلغاء حركة (بدون حذف) وطرح قيمتها من مجموع الطالب."""
    with transaction.atomic():
        # القراءة الأولى فقط لمعرفة صف المجموع الذي سيُقفل
        txn = PointTransaction.objects.get(pk=transaction_id)
        aggregate = _lock_aggregate(txn.tenant_id, txn.student_id)
        txn = PointTransaction.objects.select_for_update().get(pk=transaction_id)
        if txn.reversed_at is not None:
            raise AlreadyReversed(transaction_id)

        txn.reversed_at = timezone.now()
        txn.save(update_fields=["reversed_at"])
        _apply_delta(aggregate, -txn.amount)

    logger.info("Reversed txn %s (%+d) for student %s", txn.pk, txn.amount, txn.student_id)
    return txn


def recompute_total(student_id, tenant_id):
    """
    إعادة بناء المجموع من الحركات غير الملغاة. آمنة مع العمليات الجارية لأنها
    تمر بنفس قفل صف المجموع.
    """
    with transaction.atomic():
        aggregate = _lock_aggregate(tenant_id, student_id)
        total = (
            PointTransaction.objects.active()
            .filter(tenant_id=tenant_id, student_id=student_id)
            .aggregate(total=Sum("amount"))["total"]
        ) or 0
        if aggregate.total_points != total:
            logger.warning("Aggregate drift for student %s (tenant %s): stored %d, ledger %d",
                           student_id, tenant_id, aggregate.total_points, total)
        StudentAggregate.objects.filter(pk=aggregate.pk).update(
            total_points=total, updated_at=timezone.now()
        )
    return total


def total_points(student_id, tenant_id):
    aggregate = StudentAggregate.objects.filter(tenant_id=tenant_id, student_id=student_id).first()
    return aggregate.total_points if aggregate else 0


def student_history(student_id, tenant_id, limit=50):
    return list(
        PointTransaction.objects.filter(tenant_id=tenant_id, student_id=student_id)
        .order_by("-created_at", "-id")[:limit]
    )


# ==============================================================================
# النقاط اليدوية (مع رصيد لكل معلم في كل جلسة)
# ==============================================================================

def session_budget_usage(teacher_id, session_id):
    used = (
        PointTransaction.objects.active()
        .filter(awarded_by_id=teacher_id, session_id=session_id, source_type__in=MANUAL_SOURCE_TYPES)
        .aggregate(total=Sum(Abs("amount")))["total"]
    )
    return used or 0


def add_manual_points(student_id, tenant_id, amount, reason, session_id, teacher_id):
    """مكافأة أو خصم يدوي من المعلم. نوع المصدر يُستنتج من إشارة القيمة."""
    max_amount = getattr(settings, "MANUAL_POINTS_MAX_AMOUNT", 10)
    budget = getattr(settings, "MANUAL_POINTS_BUDGET_PER_SESSION", 20)

    if isinstance(amount, bool) or not isinstance(amount, int) or amount == 0 or abs(amount) > max_amount:
        raise ValidationError(
            f"النقاط اليدوية يجب أن تكون بين -{max_amount} و {max_amount} ولا تساوي صفراً.",
            code="invalid_amount",
        )
    if not (reason or "").strip():
        raise ValidationError("سبب النقاط مطلوب.", code="required")
    if not session_id or not teacher_id:
        raise ValidationError("الجلسة والمعلم مطلوبان للنقاط اليدوية.", code="required")

    source_type = PointSourceType.MANUAL_REWARD if amount > 0 else PointSourceType.MANUAL_PENALTY
    with transaction.atomic():
        # طلبات نفس المعلم في نفس الجلسة تتسلسل على هذا الصف حتى لو اختلف الطالب
        ManualPointsBudget.objects.select_for_update().get_or_create(teacher_id=teacher_id, session_id=session_id)
        used = session_budget_usage(teacher_id, session_id)
        if used + abs(amount) > budget:
            raise BudgetExceeded(budget, used, abs(amount))
        return award(
            student_id,
            tenant_id,
            source_type,
            amount=amount,
            reason=reason.strip(),
            session_id=session_id,
            awarded_by_id=teacher_id,
        )
