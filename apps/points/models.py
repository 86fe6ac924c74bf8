from django.core.exceptions import PermissionDenied
from django.db import models
from django.utils import timezone

# ==============================================================================
# الأنواع المغلقة (مصدر النقاط ومفاتيح القواعد)
# ==============================================================================

class PointSourceType(models.TextChoices):
    RECITATION = "RECITATION", "Recitation"
    ATTENDANCE = "ATTENDANCE", "Attendance"
    EXAM = "EXAM", "Exam"
    MANUAL_REWARD = "MANUAL_REWARD", "Manual reward"
    MANUAL_PENALTY = "MANUAL_PENALTY", "Manual penalty"


class RuleKey(models.TextChoices):
    """كتالوج مغلق لمفاتيح القواعد: مفتاح واحد لكل (مصدر × نتيجة)."""
    RECITATION_EXCELLENT = "RECITATION_EXCELLENT", "Excellent recitation"
    RECITATION_VERY_GOOD = "RECITATION_VERY_GOOD", "Very good recitation"
    RECITATION_GOOD = "RECITATION_GOOD", "Good recitation"
    RECITATION_ACCEPTABLE = "RECITATION_ACCEPTABLE", "Acceptable recitation"
    RECITATION_POOR = "RECITATION_POOR", "Poor recitation"
    ATTENDANCE_PRESENT = "ATTENDANCE_PRESENT", "Present in session"
    ATTENDANCE_ON_TIME = "ATTENDANCE_ON_TIME", "Arrived on time"
    ATTENDANCE_LATE = "ATTENDANCE_LATE", "Arrived late"
    ATTENDANCE_ABSENT = "ATTENDANCE_ABSENT", "Absent from session"
    EXAM_PASSED = "EXAM_PASSED", "Passed a juz exam"

    @property
    def source_type(self):
        prefix = self.value.split("_", 1)[0]
        return {
            "RECITATION": PointSourceType.RECITATION,
            "ATTENDANCE": PointSourceType.ATTENDANCE,
            "EXAM": PointSourceType.EXAM,
        }[prefix]


# ==============================================================================
# Models الأساسية (PointRule, PointTransaction, StudentAggregate)
# ==============================================================================

class PointRule(models.Model):
    """قاعدة نقاط خاصة بمسجد: تربط مفتاح النتيجة بعدد نقاط (موجب مكافأة، سالب خصم)."""
    tenant_id = models.CharField(max_length=64, db_index=True)
    key = models.CharField(max_length=40, choices=RuleKey.choices)
    description = models.CharField(max_length=255)
    points = models.IntegerField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]
        constraints = [
            models.UniqueConstraint(fields=["key", "tenant_id"], name="uniq_point_rule_key_tenant"),
        ]

    def __str__(self):
        return f"{self.key} ({self.tenant_id}): {self.points:+d}"


class TransactionQuerySet(models.QuerySet):
    def active(self):
        return self.filter(reversed_at__isnull=True)

    def delete(self):
        raise PermissionDenied("Point transactions are append-only; reverse them instead of deleting.")


class PointTransaction(models.Model):
    """حركة في سجل النقاط. لا تُعدّل بعد إنشائها إلا بعلامة الإلغاء، ولا تُحذف."""
    tenant_id = models.CharField(max_length=64)
    student_id = models.CharField(max_length=64, db_index=True)
    amount = models.IntegerField()
    reason = models.CharField(max_length=255)
    source_type = models.CharField(max_length=20, choices=PointSourceType.choices)
    rule_key = models.CharField(max_length=40, choices=RuleKey.choices, null=True, blank=True)
    session_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    awarded_by_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)
    reversed_at = models.DateTimeField(null=True, blank=True)

    objects = TransactionQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["tenant_id", "student_id"], name="point_txn_tenant_student"),
        ]

    def __str__(self):
        return f"{self.student_id}: {self.amount:+d} ({self.source_type})"

    @property
    def is_reversed(self):
        return self.reversed_at is not None

    def delete(self, *args, **kwargs):
        raise PermissionDenied("Point transactions are append-only; reverse them instead of deleting.")


class StudentAggregate(models.Model):
    """مجموع نقاط الطالب داخل المسجد. يساوي دائماً مجموع الحركات غير الملغاة."""
    tenant_id = models.CharField(max_length=64)
    student_id = models.CharField(max_length=64)
    total_points = models.IntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["tenant_id", "student_id"], name="uniq_aggregate_tenant_student"),
        ]

    def __str__(self):
        return f"{self.student_id} ({self.tenant_id}) = {self.total_points}"


class ManualPointsBudget(models.Model):
    """صف قفل لكل (معلم، جلسة): يُقفل قبل حساب المستخدم من رصيد النقاط اليدوية."""
    teacher_id = models.CharField(max_length=64)
    session_id = models.CharField(max_length=64)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["teacher_id", "session_id"], name="uniq_manual_budget_teacher_session"),
        ]

    def __str__(self):
        return f"{self.teacher_id} @ {self.session_id}"
