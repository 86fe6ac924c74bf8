from __future__ import annotations

import pytest
from django.core.exceptions import ValidationError

from apps.exams import services as exams
from apps.exams.models import ExamQuestionType
from apps.points import ledger, rules
from apps.points.models import PointSourceType, PointTransaction, RuleKey
from apps.progress import services
from apps.progress.models import Attendance, AttendanceStatus, Recitation, RecitationQuality, RecitationType
from apps.progress.signals import ATTENDANCE_RULE_KEYS, QUALITY_RULE_KEYS

pytestmark = pytest.mark.django_db

STUDENT = "student-1"
SESSION = "session-1"


def test_mappings_cover_every_outcome() -> None:
    assert set(QUALITY_RULE_KEYS) == set(RecitationQuality)
    assert set(ATTENDANCE_RULE_KEYS) == set(AttendanceStatus)
    for key in QUALITY_RULE_KEYS.values():
        assert key.source_type == PointSourceType.RECITATION
    for keys in ATTENDANCE_RULE_KEYS.values():
        assert all(key.source_type == PointSourceType.ATTENDANCE for key in keys)


def test_recitation_awards_points_by_quality(tenant) -> None:
    recitation = services.record_recitation(
        STUDENT, tenant, SESSION, 12, RecitationQuality.EXCELLENT, RecitationType.NEW_LESSON
    )

    txn = PointTransaction.objects.get(student_id=STUDENT)
    assert txn.source_type == PointSourceType.RECITATION
    assert txn.rule_key == RuleKey.RECITATION_EXCELLENT
    assert txn.session_id == SESSION
    assert recitation.point_transactions == [txn]
    assert ledger.total_points(STUDENT, tenant) == 5


def test_zero_point_rule_records_fact_only(tenant) -> None:
    services.record_recitation(STUDENT, tenant, SESSION, 12, RecitationQuality.POOR, RecitationType.REVIEW)

    assert Recitation.objects.count() == 1
    assert PointTransaction.objects.count() == 0


def test_missing_rule_records_fact_only(db) -> None:
    services.record_recitation(STUDENT, "no-rules", SESSION, 1, RecitationQuality.GOOD, RecitationType.REVIEW)

    assert Recitation.objects.count() == 1
    assert PointTransaction.objects.count() == 0
    assert ledger.total_points(STUDENT, "no-rules") == 0


def test_invalid_recitation_is_not_recorded(tenant) -> None:
    with pytest.raises(ValidationError):
        services.record_recitation(STUDENT, tenant, SESSION, 605, RecitationQuality.GOOD, RecitationType.REVIEW)

    assert Recitation.objects.count() == 0
    assert PointTransaction.objects.count() == 0


def test_award_failure_rolls_back_the_fact(tenant, monkeypatch) -> None:
    def broken_award(*args, **kwargs):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr(ledger, "award", broken_award)

    with pytest.raises(RuntimeError):
        services.record_recitation(STUDENT, tenant, SESSION, 3, RecitationQuality.GOOD, RecitationType.REVIEW)
    assert Recitation.objects.count() == 0


def test_bulk_recitation(tenant) -> None:
    result = services.record_bulk_recitation(STUDENT, tenant, SESSION, [
        {"page_number": 1, "quality": RecitationQuality.EXCELLENT, "type": RecitationType.NEW_LESSON},
        {"page_number": 2, "quality": RecitationQuality.GOOD, "type": RecitationType.NEW_LESSON, "surah_id": 2},
        {"page_number": 3, "quality": RecitationQuality.POOR, "type": RecitationType.REVIEW},
    ])

    assert result.page_count == 3
    assert result.total_points_awarded == 6
    assert ledger.total_points(STUDENT, tenant) == 6


def test_bulk_recitation_is_all_or_nothing(tenant) -> None:
    with pytest.raises(ValidationError):
        services.record_bulk_recitation(STUDENT, tenant, SESSION, [
            {"page_number": 1, "quality": RecitationQuality.EXCELLENT, "type": RecitationType.NEW_LESSON},
            {"page_number": 700, "quality": RecitationQuality.GOOD, "type": RecitationType.NEW_LESSON},
        ])

    assert Recitation.objects.count() == 0
    assert PointTransaction.objects.count() == 0
    assert ledger.total_points(STUDENT, tenant) == 0


def test_bulk_recitation_needs_pages(tenant) -> None:
    with pytest.raises(ValidationError):
        services.record_bulk_recitation(STUDENT, tenant, SESSION, [])


@pytest.mark.parametrize(
    ("status", "expected_keys", "expected_total"),
    [
        (AttendanceStatus.PRESENT, {RuleKey.ATTENDANCE_PRESENT, RuleKey.ATTENDANCE_ON_TIME}, 3),
        (AttendanceStatus.LATE, {RuleKey.ATTENDANCE_LATE}, 1),
        (AttendanceStatus.ABSENT, {RuleKey.ATTENDANCE_ABSENT}, -1),
        (AttendanceStatus.EXCUSED, set(), 0),
    ],
)
def test_attendance_points(tenant, status, expected_keys, expected_total) -> None:
    attendance = services.record_attendance(STUDENT, tenant, SESSION, status)

    assert {txn.rule_key for txn in attendance.point_transactions} == expected_keys
    assert ledger.total_points(STUDENT, tenant) == expected_total


def test_attendance_is_recorded_once_per_session(tenant) -> None:
    services.record_attendance(STUDENT, tenant, SESSION, AttendanceStatus.PRESENT)

    with pytest.raises(ValidationError):
        services.record_attendance(STUDENT, tenant, SESSION, AttendanceStatus.LATE)
    assert Attendance.objects.count() == 1
    assert ledger.total_points(STUDENT, tenant) == 3


def test_attendance_status_update_does_not_award_again(tenant) -> None:
    attendance = services.record_attendance(STUDENT, tenant, SESSION, AttendanceStatus.LATE)
    attendance.status = AttendanceStatus.PRESENT
    attendance.save()

    assert PointTransaction.objects.count() == 1


def test_award_manual_points(tenant) -> None:
    txn = services.award_manual_points(STUDENT, tenant, 4, "beautiful voice", SESSION, "teacher-1")

    assert txn.source_type == PointSourceType.MANUAL_REWARD
    assert ledger.total_points(STUDENT, tenant) == 4


def test_complete_exam_event(tenant) -> None:
    rules.update_rule(tenant, RuleKey.EXAM_PASSED, points=15)
    exam = exams.create_exam(STUDENT, tenant, 1, [1])
    question = exams.add_question(exam.pk, ExamQuestionType.CURRENT_PART, 10)
    exams.record_answer(question.pk, 0, 9)

    completion = services.complete_exam(exam.pk)

    assert completion.exam.final_score == 90.0
    assert completion.reward.amount == 15
    assert ledger.total_points(STUDENT, tenant) == 15
