# Generated manually for initial schema
from django.db import migrations, models
import django.utils.timezone


RULE_KEY_CHOICES = [
    ("RECITATION_EXCELLENT", "Excellent recitation"),
    ("RECITATION_VERY_GOOD", "Very good recitation"),
    ("RECITATION_GOOD", "Good recitation"),
    ("RECITATION_ACCEPTABLE", "Acceptable recitation"),
    ("RECITATION_POOR", "Poor recitation"),
    ("ATTENDANCE_PRESENT", "Present in session"),
    ("ATTENDANCE_ON_TIME", "Arrived on time"),
    ("ATTENDANCE_LATE", "Arrived late"),
    ("ATTENDANCE_ABSENT", "Absent from session"),
    ("EXAM_PASSED", "Passed a juz exam"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PointRule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(db_index=True, max_length=64)),
                ("key", models.CharField(choices=RULE_KEY_CHOICES, max_length=40)),
                ("description", models.CharField(max_length=255)),
                ("points", models.IntegerField()),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["key"]},
        ),
        migrations.AddConstraint(
            model_name="pointrule",
            constraint=models.UniqueConstraint(fields=("key", "tenant_id"), name="uniq_point_rule_key_tenant"),
        ),
        migrations.CreateModel(
            name="PointTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64)),
                ("student_id", models.CharField(db_index=True, max_length=64)),
                ("amount", models.IntegerField()),
                ("reason", models.CharField(max_length=255)),
                (
                    "source_type",
                    models.CharField(
                        choices=[
                            ("RECITATION", "Recitation"),
                            ("ATTENDANCE", "Attendance"),
                            ("EXAM", "Exam"),
                            ("MANUAL_REWARD", "Manual reward"),
                            ("MANUAL_PENALTY", "Manual penalty"),
                        ],
                        max_length=20,
                    ),
                ),
                ("rule_key", models.CharField(blank=True, choices=RULE_KEY_CHOICES, max_length=40, null=True)),
                ("session_id", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("awarded_by_id", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("reversed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.AddIndex(
            model_name="pointtransaction",
            index=models.Index(fields=["tenant_id", "student_id"], name="point_txn_tenant_student"),
        ),
        migrations.CreateModel(
            name="StudentAggregate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64)),
                ("student_id", models.CharField(max_length=64)),
                ("total_points", models.IntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.AddConstraint(
            model_name="studentaggregate",
            constraint=models.UniqueConstraint(fields=("tenant_id", "student_id"), name="uniq_aggregate_tenant_student"),
        ),
    ]
