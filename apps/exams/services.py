import logging
from dataclasses import dataclass

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.points import ledger
from apps.points.models import PointSourceType, PointTransaction, RuleKey

from .exceptions import IncompleteQuestions, InvalidTransition, ScoreOutOfRange
from .models import Exam, ExamQuestion, ExamQuestionType, ExamStatus
from .scoring import build_scoring_config, compute_scores, score_from_mistakes

logger = logging.getLogger(__name__)


@dataclass
class ExamCompletion:
    exam: Exam
    reward: PointTransaction | None = None
    reward_error: Exception | None = None

    @property
    def reward_pending(self):
        return self.exam.reward_pending


def _check_juz(value, field):
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 30:
        raise ValidationError({field: f"رقم الجزء يجب أن يكون بين 1 و 30 (القيمة: {value})."})


def _lock_exam(exam_id):
    # يجب أن تُستدعى داخل transaction.atomic
    return Exam.objects.select_for_update().get(pk=exam_id)


def _require_pending(exam, action):
    if exam.status != ExamStatus.PENDING:
        raise InvalidTransition(exam.pk, exam.status, action)


# ==============================================================================
# إنشاء الاختبار وإضافة الأسئلة
# ==============================================================================

def create_exam(student_id, tenant_id, juz_number, tested_parts, examiner_id=None, date=None, notes=None):
    """
    بدء اختبار جديد. رقم المحاولة = 1 + عدد كل المحاولات السابقة لنفس (الطالب، الجزء)
    بغض النظر عن حالتها.
    """
    _check_juz(juz_number, "juz_number")
    parts = list(tested_parts or [])
    if not parts:
        raise ValidationError({"tested_parts": "يجب تحديد جزء واحد على الأقل."})
    for part in parts:
        _check_juz(part, "tested_parts")

    try:
        with transaction.atomic():
            attempt = Exam.objects.filter(student_id=student_id, juz_number=juz_number).count() + 1
            exam = Exam(
                tenant_id=tenant_id,
                student_id=student_id,
                examiner_id=examiner_id,
                juz_number=juz_number,
                attempt_number=attempt,
                tested_parts=sorted(set(parts)),
                notes=notes,
            )
            if date is not None:
                exam.date = date
            exam.full_clean(validate_constraints=False)
            exam.save()
    except IntegrityError as exc:
        raise ValidationError(
            {"attempt_number": "تم تسجيل محاولة أخرى لنفس الجزء في نفس اللحظة، أعد المحاولة."}
        ) from exc

    logger.info("Created exam %s for student %s juz %d (attempt %d)",
                exam.pk, student_id, juz_number, exam.attempt_number)
    return exam


def add_question(exam_id, question_type, max_score, question_juz_number=None, question_text=None):
    if question_type not in ExamQuestionType.values:
        raise ValidationError({"type": f"نوع سؤال غير معروف: {question_type}"})
    if isinstance(max_score, bool) or not isinstance(max_score, int) or max_score < 1:
        raise ValidationError({"max_score": "الدرجة القصوى يجب أن تكون عدداً صحيحاً موجباً."})

    with transaction.atomic():
        exam = _lock_exam(exam_id)
        _require_pending(exam, "add a question to")

        if question_type == ExamQuestionType.CURRENT_PART:
            if question_juz_number is not None and question_juz_number != exam.juz_number:
                raise ValidationError(
                    {"question_juz_number": "سؤال الجزء الحالي يخص جزء الاختبار نفسه."}
                )
            question_juz_number = exam.juz_number
        else:
            if question_juz_number not in exam.tested_parts:
                raise ValidationError(
                    {"question_juz_number": "سؤال التراكمي يجب أن يكون من الأجزاء المختبرة."}
                )

        question = ExamQuestion.objects.create(
            exam=exam,
            type=question_type,
            question_juz_number=question_juz_number,
            question_text=question_text,
            max_score=max_score,
        )
    return question


def record_answer(question_id, mistakes_count, achieved_score):
    if isinstance(mistakes_count, bool) or not isinstance(mistakes_count, int) or mistakes_count < 0:
        raise ValidationError({"mistakes_count": "عدد الأخطاء يجب أن يكون صفراً أو أكثر."})

    with transaction.atomic():
        exam_id = ExamQuestion.objects.values_list("exam_id", flat=True).get(pk=question_id)
        exam = _lock_exam(exam_id)
        _require_pending(exam, "record an answer on")
        question = ExamQuestion.objects.get(pk=question_id)

        if isinstance(achieved_score, bool) or not isinstance(achieved_score, int) \
                or not 0 <= achieved_score <= question.max_score:
            raise ScoreOutOfRange(achieved_score, question.max_score)

        question.mistakes_count = mistakes_count
        question.achieved_score = achieved_score
        question.answered_at = timezone.now()
        question.save(update_fields=["mistakes_count", "achieved_score", "answered_at"])
    return question


def record_mistakes(question_id, mistakes_count, config=None):
    """تسجيل الإجابة بعدد الأخطاء فقط؛ الدرجة تُشتق بخصم ثابت لكل خطأ."""
    config = config or build_scoring_config()
    max_score = ExamQuestion.objects.values_list("max_score", flat=True).get(pk=question_id)
    achieved = score_from_mistakes(max_score, mistakes_count, config.points_per_mistake)
    return record_answer(question_id, mistakes_count, achieved)


# ==============================================================================
# إنهاء الاختبار وحساب الدرجات
# ==============================================================================

def _question_problems(questions):
    if not questions:
        return ["exam has no questions"]
    problems = []
    for q in questions:
        if q.answered_at is None:
            problems.append(f"question {q.pk} has not been answered")
        elif q.max_score < 1 or not 0 <= q.achieved_score <= q.max_score:
            problems.append(f"question {q.pk} has score {q.achieved_score}/{q.max_score}")
    return problems


def complete(exam_id, config=None):
    """
    إغلاق الاختبار وحساب الدرجات. مكافأة النجاح تُمنح بعد الإغلاق بأفضل جهد:
    فشلها لا يلغي الإغلاق ويبقى الاختبار بمكافأة معلّقة حتى يُعاد منحها.
    """
    config = config or build_scoring_config()

    with transaction.atomic():
        exam = _lock_exam(exam_id)
        _require_pending(exam, "complete")
        questions = list(exam.questions.all())
        problems = _question_problems(questions)
        if problems:
            raise IncompleteQuestions(exam.pk, problems)

        scores = compute_scores(questions, config)
        exam.current_part_score = scores.current_part_score
        exam.cumulative_score = scores.cumulative_score
        exam.final_score = scores.final_score
        exam.passed = scores.passed
        exam.status = ExamStatus.COMPLETED
        exam.completed_at = timezone.now()
        exam.save(update_fields=[
            "current_part_score", "cumulative_score", "final_score",
            "passed", "status", "completed_at",
        ])

    logger.info("Completed exam %s: final %.2f (%s)",
                exam.pk, exam.final_score, "passed" if exam.passed else "failed")

    completion = ExamCompletion(exam=exam)
    if exam.passed:
        completion.reward, completion.reward_error = _award_pass_reward(exam)
    return completion


def _award_pass_reward(exam):
    try:
        with transaction.atomic():
            reward = ledger.award(
                exam.student_id,
                exam.tenant_id,
                PointSourceType.EXAM,
                key=RuleKey.EXAM_PASSED,
                reason=f"Passed juz {exam.juz_number} exam (attempt {exam.attempt_number})",
                awarded_by_id=exam.examiner_id,
            )
            exam.reward_transaction = reward
            exam.save(update_fields=["reward_transaction"])
    except (ObjectDoesNotExist, ValidationError) as exc:
        logger.warning("Exam %s completed but the pass reward is pending: %s", exam.pk, exc)
        exam.reward_transaction = None
        return None, exc
    return reward, None


def retry_pending_reward(exam_id):
    """إعادة محاولة منح مكافأة النجاح لاختبار ناجح بلا مكافأة."""
    with transaction.atomic():
        exam = _lock_exam(exam_id)
        if exam.status != ExamStatus.COMPLETED:
            raise InvalidTransition(exam.pk, exam.status, "reward")
        if not exam.reward_pending:
            return ExamCompletion(exam=exam)
        reward, error = _award_pass_reward(exam)
    return ExamCompletion(exam=exam, reward=reward, reward_error=error)


def pending_reward_exams(tenant_id=None):
    qs = Exam.objects.filter(
        status=ExamStatus.COMPLETED, passed=True, reward_transaction__isnull=True
    )
    if tenant_id is not None:
        qs = qs.filter(tenant_id=tenant_id)
    return list(qs.order_by("id"))


# ==============================================================================
# الاستعلامات
# ==============================================================================

def get_exam(exam_id):
    return Exam.objects.prefetch_related("questions").get(pk=exam_id)


def exams_for_student(student_id):
    return list(Exam.objects.filter(student_id=student_id).prefetch_related("questions")
                .order_by("-date", "-id"))
