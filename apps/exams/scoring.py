"""
حساب درجات الاختبار. دوال نقية: نفس الأسئلة ونفس الإعدادات تعطي نفس النتيجة دائماً.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .models import ExamQuestionType

DEFAULT_SCORING = {
    "CURRENT_PART_WEIGHT": 70.0,
    "CUMULATIVE_WEIGHT": 30.0,
    "PASSING_SCORE": 80.0,
    "POINTS_PER_MISTAKE": 0.5,
}


@dataclass(frozen=True)
class ScoringConfig:
    current_part_weight: float
    cumulative_weight: float
    passing_score: float
    points_per_mistake: float

    def __post_init__(self):
        if self.current_part_weight < 0 or self.cumulative_weight < 0:
            raise ImproperlyConfigured("Exam weights must not be negative.")
        if self.current_part_weight + self.cumulative_weight <= 0:
            raise ImproperlyConfigured("Exam weights must have a positive sum.")
        if not 0 <= self.passing_score <= 100:
            raise ImproperlyConfigured("Exam passing score must be between 0 and 100.")
        if self.points_per_mistake < 0:
            raise ImproperlyConfigured("Points per mistake must not be negative.")


@dataclass(frozen=True)
class ExamScores:
    current_part_score: float | None
    cumulative_score: float | None
    final_score: float
    passed: bool


def build_scoring_config(overrides=None):
    merged = dict(DEFAULT_SCORING)
    merged.update(getattr(settings, "EXAM_SCORING", {}) or {})
    if overrides:
        merged.update(overrides)
    return ScoringConfig(
        current_part_weight=float(merged["CURRENT_PART_WEIGHT"]),
        cumulative_weight=float(merged["CUMULATIVE_WEIGHT"]),
        passing_score=float(merged["PASSING_SCORE"]),
        points_per_mistake=float(merged["POINTS_PER_MISTAKE"]),
    )


def _round(value):
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def percentage(questions):
    """100 × مجموع المحقق / مجموع الحد الأقصى، أو None لو لا توجد أسئلة."""
    questions = list(questions)
    if not questions:
        return None
    max_total = sum(q.max_score for q in questions)
    achieved_total = sum(q.achieved_score for q in questions)
    return _round(100 * achieved_total / max_total)


def compute_scores(questions, config):
    questions = list(questions)
    by_type = {t: [] for t in ExamQuestionType}
    for q in questions:
        by_type[ExamQuestionType(q.type)].append(q)

    current = percentage(by_type[ExamQuestionType.CURRENT_PART])
    cumulative = percentage(by_type[ExamQuestionType.CUMULATIVE])

    if current is not None and cumulative is not None:
        weighted = (
            config.current_part_weight * current + config.cumulative_weight * cumulative
        ) / (config.current_part_weight + config.cumulative_weight)
        final = _round(weighted)
    elif current is not None:
        final = current
    elif cumulative is not None:
        final = cumulative
    else:
        raise ValueError("Cannot score an exam without questions.")

    return ExamScores(
        current_part_score=current,
        cumulative_score=cumulative,
        final_score=final,
        passed=final >= config.passing_score,
    )


def score_from_mistakes(max_score, mistakes_count, points_per_mistake):
    """الدرجة = الحد الأقصى - (الأخطاء × خصم الخطأ)، مقربة لأقرب عدد صحيح ولا تقل عن صفر."""
    raw = Decimal(str(max_score)) - Decimal(mistakes_count) * Decimal(str(points_per_mistake))
    return max(0, int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))
