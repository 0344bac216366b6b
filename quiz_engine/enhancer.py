"""Post-process normalized questions for presentation."""
from __future__ import annotations

from dataclasses import replace

from quiz_engine.models import MultipleChoiceQuestion, Question, Quiz

LEARNING_OBJECTIVES = {
    "multiple-choice": "Identify and recall key concepts",
    "true-false": "Evaluate factual statements",
    "short-answer": "Analyze and explain relationships",
    "fill-blank": "Remember specific details and terminology",
}

TERMINAL_PUNCTUATION = (".", "!", "?")


def _punctuate(text: str) -> str:
    text = text.strip()
    if text and not text.endswith(TERMINAL_PUNCTUATION):
        text += "."
    return text


def enhance_question(q: Question) -> Question:
    changes = {
        "question": _punctuate(q.question),
        "learning_objective": LEARNING_OBJECTIVES[q.type],
    }
    if isinstance(q, MultipleChoiceQuestion):
        changes["options"] = tuple(o.strip() for o in q.options)
    return replace(q, **changes)


def enhance(quiz: Quiz) -> Quiz:
    """Return a new quiz with trimmed options, punctuated questions and objectives.

    Ids are kept, so ``enhance(enhance(q)) == enhance(q)``.
    """
    return replace(quiz, questions=tuple(enhance_question(q) for q in quiz.questions))
