from django.core.exceptions import ValidationError

from .models import PointRule


class RuleNotFound(PointRule.DoesNotExist):
    """لا توجد قاعدة مفعّلة لهذا المفتاح داخل هذا المسجد."""

    def __init__(self, tenant_id, key):
        self.tenant_id = tenant_id
        self.key = key
        super().__init__(f"No active point rule {key!r} for tenant {tenant_id!r}")


class AlreadyReversed(Exception):
    def __init__(self, transaction_id):
        self.transaction_id = transaction_id
        super().__init__(f"Point transaction {transaction_id} is already reversed")


class BudgetExceeded(ValidationError):
    """تجاوز المعلم رصيد النقاط اليدوية المسموح له في الجلسة."""

    def __init__(self, budget, used, requested):
        self.budget = budget
        self.used = used
        self.requested = requested
        super().__init__(
            "تم تجاوز رصيد النقاط اليدوية لهذه الجلسة. "
            f"المسموح: {budget}، المستخدم: {used}، المطلوب: {requested}",
            code="budget_exceeded",
        )
