from django.core.exceptions import ValidationError


class InvalidTransition(Exception):
    """الاختبار ليس في الحالة المطلوبة (مثلاً محاولة تعديل اختبار مكتمل)."""

    def __init__(self, exam_id, status, action):
        self.exam_id = exam_id
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action} exam {exam_id} in status {status}")


class ScoreOutOfRange(ValidationError):
    def __init__(self, achieved_score, max_score):
        self.achieved_score = achieved_score
        self.max_score = max_score
        super().__init__(
            f"الدرجة {achieved_score} خارج النطاق المسموح (0 - {max_score}).",
            code="score_out_of_range",
        )


class IncompleteQuestions(Exception):
    def __init__(self, exam_id, problems):
        self.exam_id = exam_id
        self.problems = list(problems)
        super().__init__(f"Exam {exam_id} cannot be completed: " + "; ".join(self.problems))
