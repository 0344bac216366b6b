"""Grade learner answers against a quiz."""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from quiz_engine.errors import GradingError
from quiz_engine.models import (
    UNANSWERED,
    AnswerSet,
    FillBlankQuestion,
    GradeResult,
    MultipleChoiceQuestion,
    Question,
    Quiz,
    ShortAnswerQuestion,
    TrueFalseQuestion,
    Verdict,
)

_log = logging.getLogger("quiz_engine.grading")

# (threshold, message), checked top-down
FEEDBACK_TIERS = [
    (90, "Outstanding!"),
    (80, "Excellent!"),
    (70, "Good job!"),
    (60, "Keep practicing!"),
]
FEEDBACK_FALLBACK = "Review and try again!"


def _is_unanswered(value: Any) -> bool:
    return value is UNANSWERED or value is None


def match_multiple_choice(q: MultipleChoiceQuestion, submitted: Any) -> bool:
    if isinstance(submitted, bool) or not isinstance(submitted, int):
        return False
    return submitted == q.correct


def match_true_false(q: TrueFalseQuestion, submitted: Any) -> bool:
    return isinstance(submitted, bool) and submitted == q.correct


def match_short_answer(q: ShortAnswerQuestion, submitted: Any) -> bool:
    """Keyword-presence heuristic: correct if any key point appears in the text.

    This is deliberately lenient and is not semantic grading; an answer that
    mentions a key point in a wrong statement still counts.
    """
    if not isinstance(submitted, str) or not submitted.strip():
        return False
    text = submitted.lower()
    return any(kp.lower() in text for kp in q.key_points)


def match_fill_blank(q: FillBlankQuestion, submitted: Any) -> bool:
    """Equal after lower-casing and trimming, or either one contains the other."""
    if not isinstance(submitted, str):
        return False
    user = submitted.lower().strip()
    expected = q.answer.lower().strip()
    if not user:
        # An empty string is a substring of everything
        return False
    return user == expected or expected in user or user in expected


MATCHERS = {
    MultipleChoiceQuestion.type: match_multiple_choice,
    TrueFalseQuestion.type: match_true_false,
    ShortAnswerQuestion.type: match_short_answer,
    FillBlankQuestion.type: match_fill_blank,
}


def grade_question(index: int, q: Question, submitted: Any) -> Verdict:
    answered = not _is_unanswered(submitted)
    correct = answered and MATCHERS[q.type](q, submitted)
    return Verdict(
        index=index,
        question_id=q.id,
        question_type=q.type,
        correct=correct,
        answered=answered,
        submitted=submitted if answered else UNANSWERED,
        expected=q.expected(),
    )


def percent_of(score: int, total: int) -> int:
    # round() would use banker's rounding; percentages round half up
    return int((Decimal(100 * score) / Decimal(total)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def performance_message(percent: int) -> str:
    for threshold, message in FEEDBACK_TIERS:
        if percent >= threshold:
            return message
    return FEEDBACK_FALLBACK


def grade(quiz: Quiz, answers: AnswerSet) -> GradeResult:
    """Grade *answers* (question index → submitted value) against *quiz*.

    Missing indices count as unanswered, which is always incorrect.
    Raises GradingError for a quiz with no questions.
    """
    total = len(quiz.questions)
    if total == 0:
        raise GradingError(GradingError.EMPTY_QUIZ, "Cannot grade a quiz with no questions")

    verdicts = tuple(
        grade_question(i, q, answers.get(i, UNANSWERED))
        for i, q in enumerate(quiz.questions)
    )
    score = sum(1 for v in verdicts if v.correct)
    percent = percent_of(score, total)
    _log.info("Graded quiz: %d/%d (%d%%)", score, total, percent)
    return GradeResult(
        verdicts=verdicts,
        score=score,
        total=total,
        percent=percent,
        message=performance_message(percent),
    )
