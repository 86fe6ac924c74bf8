# Generated manually for initial schema
import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Recitation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64)),
                ("student_id", models.CharField(db_index=True, max_length=64)),
                ("session_id", models.CharField(db_index=True, max_length=64)),
                (
                    "page_number",
                    models.PositiveSmallIntegerField(
                        db_index=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(604),
                        ],
                    ),
                ),
                (
                    "quality",
                    models.CharField(
                        choices=[
                            ("EXCELLENT", "ممتاز"),
                            ("VERY_GOOD", "جيد جداً"),
                            ("GOOD", "جيد"),
                            ("ACCEPTABLE", "مقبول"),
                            ("POOR", "ضعيف"),
                        ],
                        max_length=12,
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[("NEW_LESSON", "حفظ جديد"), ("REVIEW", "مراجعة")],
                        max_length=12,
                    ),
                ),
                ("mistakes_count", models.PositiveIntegerField(default=0)),
                ("surah_id", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="Attendance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64)),
                ("student_id", models.CharField(max_length=64)),
                ("session_id", models.CharField(max_length=64)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PRESENT", "حاضر"),
                            ("ABSENT", "غائب"),
                            ("LATE", "متأخر"),
                            ("EXCUSED", "بعذر"),
                        ],
                        default="PRESENT",
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["-created_at"], "unique_together": {("student_id", "session_id")}},
        ),
    ]
