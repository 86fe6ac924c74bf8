# Generated manually for the manual points budget lock
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("points", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ManualPointsBudget",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("teacher_id", models.CharField(max_length=64)),
                ("session_id", models.CharField(max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.AddConstraint(
            model_name="manualpointsbudget",
            constraint=models.UniqueConstraint(
                fields=("teacher_id", "session_id"), name="uniq_manual_budget_teacher_session"
            ),
        ),
    ]
