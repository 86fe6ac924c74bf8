import pytest

from apps.points import rules

TENANT = "mosque-1"
OTHER_TENANT = "mosque-2"


@pytest.fixture
def tenant(db):
    rules.seed_default_rules(TENANT)
    return TENANT


@pytest.fixture
def other_tenant(db):
    rules.seed_default_rules(OTHER_TENANT)
    return OTHER_TENANT
