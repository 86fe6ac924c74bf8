from __future__ import annotations

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.exams import services as exams
from apps.exams.models import ExamQuestionType
from apps.points import ledger, rules
from apps.points.models import PointRule, PointSourceType, RuleKey, StudentAggregate

pytestmark = pytest.mark.django_db


def test_seed_point_rules_command(db) -> None:
    out = StringIO()
    call_command("seed_point_rules", "mosque-a", "mosque-b", stdout=out)

    assert PointRule.objects.filter(tenant_id="mosque-a").count() == len(RuleKey)
    assert PointRule.objects.filter(tenant_id="mosque-b").count() == len(RuleKey)
    assert f"Created {2 * len(RuleKey)} rule(s)" in out.getvalue()

    out = StringIO()
    call_command("seed_point_rules", "mosque-a", stdout=out)
    assert "Created 0 rule(s)" in out.getvalue()


def test_recompute_points_command_repairs_drift(tenant) -> None:
    ledger.award("student-1", tenant, PointSourceType.RECITATION, key=RuleKey.RECITATION_EXCELLENT)
    ledger.award("student-2", tenant, PointSourceType.ATTENDANCE, key=RuleKey.ATTENDANCE_PRESENT)
    StudentAggregate.objects.filter(student_id="student-1").update(total_points=42)

    out = StringIO()
    call_command("recompute_points", stdout=out)

    assert ledger.total_points("student-1", tenant) == 5
    assert ledger.total_points("student-2", tenant) == 2
    assert "Recomputed 2 student total(s), corrected 1" in out.getvalue()


def test_recompute_points_for_one_student(tenant) -> None:
    ledger.award("student-1", tenant, PointSourceType.RECITATION, key=RuleKey.RECITATION_GOOD)
    StudentAggregate.objects.update(total_points=0)

    call_command("recompute_points", tenant=tenant, student="student-1", stdout=StringIO())

    assert ledger.total_points("student-1", tenant) == 1


def test_recompute_points_student_requires_tenant(db) -> None:
    with pytest.raises(CommandError):
        call_command("recompute_points", student="student-1", stdout=StringIO())


def test_retry_exam_rewards_command(tenant) -> None:
    rules.update_rule(tenant, RuleKey.EXAM_PASSED, is_active=False)
    exam = exams.create_exam("student-1", tenant, 3, [1, 2])
    question = exams.add_question(exam.pk, ExamQuestionType.CURRENT_PART, 10)
    exams.record_answer(question.pk, 0, 10)
    exams.complete(exam.pk)

    out = StringIO()
    call_command("retry_exam_rewards", stdout=out)
    assert "Awarded 0 of 1" in out.getvalue()

    rules.update_rule(tenant, RuleKey.EXAM_PASSED, is_active=True)
    out = StringIO()
    call_command("retry_exam_rewards", tenant=tenant, stdout=out)

    assert "Awarded 1 of 1" in out.getvalue()
    assert exams.pending_reward_exams() == []
    assert ledger.total_points("student-1", tenant) == 10
