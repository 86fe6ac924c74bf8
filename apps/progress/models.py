from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

# ==============================================================================
# الأنواع المغلقة (جودة التسميع ونوعه وحالة الحضور)
# ==============================================================================

class RecitationQuality(models.TextChoices):
    EXCELLENT = "EXCELLENT", "ممتاز"
    VERY_GOOD = "VERY_GOOD", "جيد جداً"
    GOOD = "GOOD", "جيد"
    ACCEPTABLE = "ACCEPTABLE", "مقبول"
    POOR = "POOR", "ضعيف"


class RecitationType(models.TextChoices):
    NEW_LESSON = "NEW_LESSON", "حفظ جديد"
    REVIEW = "REVIEW", "مراجعة"


class AttendanceStatus(models.TextChoices):
    PRESENT = "PRESENT", "حاضر"
    ABSENT = "ABSENT", "غائب"
    LATE = "LATE", "متأخر"
    EXCUSED = "EXCUSED", "بعذر"


# ==============================================================================
# Models الخاصة بالوقائع (Recitation, Attendance)
# ==============================================================================

class Recitation(models.Model):
    """تسميع صفحة واحدة من مصحف المدينة (1-604) خلال جلسة."""
    tenant_id = models.CharField(max_length=64)
    student_id = models.CharField(max_length=64, db_index=True)
    session_id = models.CharField(max_length=64, db_index=True)
    page_number = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(604)], db_index=True
    )
    quality = models.CharField(max_length=12, choices=RecitationQuality.choices)
    type = models.CharField(max_length=12, choices=RecitationType.choices)
    mistakes_count = models.PositiveIntegerField(default=0)
    surah_id = models.PositiveSmallIntegerField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.student_id} p.{self.page_number} ({self.quality})"

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class Attendance(models.Model):
    """موديل تسجيل الحضور والغياب."""
    tenant_id = models.CharField(max_length=64)
    student_id = models.CharField(max_length=64)
    session_id = models.CharField(max_length=64)
    status = models.CharField(max_length=10, choices=AttendanceStatus.choices, default=AttendanceStatus.PRESENT)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("student_id", "session_id")
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.student_id} @ {self.session_id}: {self.status}"

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
