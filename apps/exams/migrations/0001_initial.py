# Generated manually for initial schema
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("points", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Exam",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64)),
                ("student_id", models.CharField(db_index=True, max_length=64)),
                ("examiner_id", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("date", models.DateField(db_index=True, default=django.utils.timezone.localdate)),
                (
                    "juz_number",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(30),
                        ]
                    ),
                ),
                (
                    "attempt_number",
                    models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("tested_parts", models.JSONField(default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("COMPLETED", "Completed")],
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                ("current_part_score", models.FloatField(blank=True, null=True)),
                ("cumulative_score", models.FloatField(blank=True, null=True)),
                ("final_score", models.FloatField(blank=True, null=True)),
                ("passed", models.BooleanField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "reward_transaction",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="points.pointtransaction",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["-date", "-id"]},
        ),
        migrations.AddConstraint(
            model_name="exam",
            constraint=models.UniqueConstraint(
                fields=("student_id", "juz_number", "attempt_number"), name="uniq_exam_attempt"
            ),
        ),
        migrations.CreateModel(
            name="ExamQuestion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type",
                    models.CharField(
                        choices=[("CURRENT_PART", "Current part"), ("CUMULATIVE", "Cumulative")],
                        max_length=15,
                    ),
                ),
                (
                    "question_juz_number",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(30),
                        ],
                    ),
                ),
                ("question_text", models.TextField(blank=True, null=True)),
                ("mistakes_count", models.PositiveIntegerField(default=0)),
                ("max_score", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("achieved_score", models.PositiveIntegerField(default=0)),
                ("answered_at", models.DateTimeField(blank=True, null=True)),
                (
                    "exam",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="questions",
                        to="exams.exam",
                    ),
                ),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.AddConstraint(
            model_name="examquestion",
            constraint=models.CheckConstraint(
                condition=models.Q(("achieved_score__lte", models.F("max_score"))),
                name="exam_question_achieved_lte_max",
            ),
        ),
    ]
