from django.core.exceptions import PermissionDenied
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

JUZ_VALIDATORS = [MinValueValidator(1), MaxValueValidator(30)]


class AuditedQuerySet(models.QuerySet):
    """الاختبارات وأسئلتها تبقى للمراجعة: الحذف الجماعي مرفوض كالحذف الفردي."""

    def delete(self):
        raise PermissionDenied(f"{self.model._meta.verbose_name_plural} are kept for audit and cannot be deleted.")


class ExamStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    COMPLETED = "COMPLETED", "Completed"


class ExamQuestionType(models.TextChoices):
    CURRENT_PART = "CURRENT_PART", "Current part"
    CUMULATIVE = "CUMULATIVE", "Cumulative"


class Exam(models.Model):
    """
    اختبار جزء للطالب. يُنشأ PENDING، تُضاف له الأسئلة، ثم يُغلق مرة واحدة
    إلى COMPLETED حيث تُحسب الدرجات وتُثبّت.
    """
    tenant_id = models.CharField(max_length=64)
    student_id = models.CharField(max_length=64, db_index=True)
    examiner_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    date = models.DateField(default=timezone.localdate, db_index=True)
    juz_number = models.PositiveSmallIntegerField(validators=JUZ_VALIDATORS)
    attempt_number = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    tested_parts = models.JSONField(default=list)
    status = models.CharField(max_length=10, choices=ExamStatus.choices, default=ExamStatus.PENDING)
    current_part_score = models.FloatField(null=True, blank=True)
    cumulative_score = models.FloatField(null=True, blank=True)
    final_score = models.FloatField(null=True, blank=True)
    passed = models.BooleanField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    # حركة مكافأة النجاح؛ تبقى فارغة لو فشل منحها (مكافأة معلّقة)
    reward_transaction = models.ForeignKey(
        "points.PointTransaction", null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AuditedQuerySet.as_manager()

    class Meta:
        ordering = ["-date", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["student_id", "juz_number", "attempt_number"], name="uniq_exam_attempt"
            ),
        ]

    def __str__(self):
        return f"Exam {self.student_id} juz {self.juz_number} #{self.attempt_number} ({self.status})"

    @property
    def reward_pending(self):
        # المكافأة الملغاة يدوياً نهائية: لا تعود معلّقة ولا يعيد منحها retry_exam_rewards
        return bool(self.passed) and self.reward_transaction_id is None

    def delete(self, *args, **kwargs):
        raise PermissionDenied("Exams are kept for audit and cannot be deleted.")


class ExamQuestion(models.Model):
    exam = models.ForeignKey(Exam, on_delete=models.PROTECT, related_name="questions")
    type = models.CharField(max_length=15, choices=ExamQuestionType.choices)
    question_juz_number = models.PositiveSmallIntegerField(null=True, blank=True, validators=JUZ_VALIDATORS)
    question_text = models.TextField(null=True, blank=True)
    mistakes_count = models.PositiveIntegerField(default=0)
    max_score = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    achieved_score = models.PositiveIntegerField(default=0)
    answered_at = models.DateTimeField(null=True, blank=True)

    objects = AuditedQuerySet.as_manager()

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(achieved_score__lte=models.F("max_score")),
                name="exam_question_achieved_lte_max",
            ),
        ]

    def __str__(self):
        return f"{self.type} {self.achieved_score}/{self.max_score}"

    def delete(self, *args, **kwargs):
        raise PermissionDenied("Exam questions are kept for audit and cannot be deleted.")
