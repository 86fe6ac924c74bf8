from __future__ import annotations

import pytest
from django.core.exceptions import ValidationError

from apps.points import rules
from apps.points.exceptions import RuleNotFound
from apps.points.models import PointRule, RuleKey

pytestmark = pytest.mark.django_db


def test_seed_default_rules_is_idempotent(db) -> None:
    assert rules.seed_default_rules("t1") == len(RuleKey)
    assert rules.seed_default_rules("t1") == 0
    assert PointRule.objects.filter(tenant_id="t1").count() == len(RuleKey)


def test_seed_keeps_edited_rules(db) -> None:
    PointRule.objects.create(
        tenant_id="t1", key=RuleKey.RECITATION_EXCELLENT, description="custom", points=7
    )

    assert rules.seed_default_rules("t1") == len(RuleKey) - 1
    assert rules.resolve("t1", RuleKey.RECITATION_EXCELLENT).points == 7


def test_default_rule_values(tenant) -> None:
    points = {rule.key: rule.points for rule in rules.list_rules(tenant)}

    assert points[RuleKey.RECITATION_EXCELLENT] == 5
    assert points[RuleKey.RECITATION_VERY_GOOD] == 3
    assert points[RuleKey.ATTENDANCE_ABSENT] == -1
    assert points[RuleKey.EXAM_PASSED] == 10


def test_resolve_returns_active_rule(tenant) -> None:
    rule = rules.resolve(tenant, RuleKey.ATTENDANCE_PRESENT)

    assert rule.tenant_id == tenant
    assert rule.points == 2


def test_resolve_never_crosses_tenants(tenant) -> None:
    with pytest.raises(RuleNotFound):
        rules.resolve("unknown-mosque", RuleKey.ATTENDANCE_PRESENT)


def test_resolve_rejects_inactive_and_unknown_keys(tenant) -> None:
    rules.update_rule(tenant, RuleKey.EXAM_PASSED, is_active=False)

    with pytest.raises(RuleNotFound):
        rules.resolve(tenant, RuleKey.EXAM_PASSED)
    with pytest.raises(RuleNotFound) as excinfo:
        rules.resolve(tenant, "RECITATION_PERFECT")
    assert excinfo.value.key == "RECITATION_PERFECT"


def test_rule_not_found_is_a_does_not_exist(tenant) -> None:
    with pytest.raises(PointRule.DoesNotExist):
        rules.resolve(tenant, "NOPE")


def test_update_rule_can_reactivate(tenant) -> None:
    rules.update_rule(tenant, RuleKey.ATTENDANCE_LATE, is_active=False)
    rule = rules.update_rule(tenant, RuleKey.ATTENDANCE_LATE, points=-2, is_active=True)

    assert rule.is_active
    assert rules.resolve(tenant, RuleKey.ATTENDANCE_LATE).points == -2


def test_update_missing_rule_raises(db) -> None:
    with pytest.raises(RuleNotFound):
        rules.update_rule("t1", RuleKey.EXAM_PASSED, points=3)


def test_bulk_update_is_all_or_nothing(tenant) -> None:
    with pytest.raises(RuleNotFound):
        rules.bulk_update_points(tenant, {RuleKey.RECITATION_GOOD: 4, "BOGUS": 1})
    assert rules.resolve(tenant, RuleKey.RECITATION_GOOD).points == 1

    updated = rules.bulk_update_points(
        tenant, {RuleKey.RECITATION_GOOD: 4, RuleKey.RECITATION_POOR: -1}
    )
    assert len(updated) == 2
    assert rules.resolve(tenant, RuleKey.RECITATION_POOR).points == -1


@pytest.mark.parametrize("points", [True, "3", 2.5, None])
def test_bulk_update_rejects_non_integer_points(tenant, points) -> None:
    with pytest.raises(ValidationError):
        rules.bulk_update_points(tenant, {RuleKey.RECITATION_GOOD: 4, RuleKey.RECITATION_POOR: points})

    assert rules.resolve(tenant, RuleKey.RECITATION_GOOD).points == 1
    assert rules.resolve(tenant, RuleKey.RECITATION_POOR).points == 0


@pytest.mark.parametrize("points", [True, "3", 2.5])
def test_update_rule_rejects_non_integer_points(tenant, points) -> None:
    with pytest.raises(ValidationError):
        rules.update_rule(tenant, RuleKey.RECITATION_GOOD, points=points)
    assert rules.resolve(tenant, RuleKey.RECITATION_GOOD).points == 1
