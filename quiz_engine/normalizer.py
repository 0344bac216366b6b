"""Validate a candidate quiz document and turn it into a canonical Quiz."""
from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from quiz_engine.errors import ValidationError
from quiz_engine.models import (
    QUESTION_TYPES,
    GenerationOptions,
    Question,
    Quiz,
    QuizMetadata,
    question_from_dict,
)

_log = logging.getLogger("quiz_engine.normalizer")

PLACEHOLDER_EXPLANATION = "No explanation provided."

# Spellings the completion service uses instead of the canonical type tags
TYPE_ALIASES = {
    "multiple_choice": "multiple-choice",
    "multiplechoice": "multiple-choice",
    "mcq": "multiple-choice",
    "true_false": "true-false",
    "truefalse": "true-false",
    "true/false": "true-false",
    "boolean": "true-false",
    "short_answer": "short-answer",
    "shortanswer": "short-answer",
    "fill_blank": "fill-blank",
    "fill-in-the-blank": "fill-blank",
    "fill_in_the_blank": "fill-blank",
    "fill-in-blank": "fill-blank",
    "fillblank": "fill-blank",
}


def _canonical_type(value) -> str | None:
    if not isinstance(value, str):
        return None
    t = value.strip().lower().replace(" ", "-")
    if t in QUESTION_TYPES:
        return t
    return TYPE_ALIASES.get(t) or TYPE_ALIASES.get(t.replace("-", "_"))


def _coerce_mc_correct(value, options) -> int | object:
    """Map a numeric string, option letter or option text to an index."""
    if isinstance(value, str):
        s = value.strip()
        if s.isascii() and s.isdigit():
            return int(s)
        m = re.fullmatch(r"\(?([A-Za-z])[\)\.]?", s)
        if m and isinstance(options, list) and len(options) <= 26:
            idx = ord(m.group(1).lower()) - ord("a")
            if 0 <= idx < len(options):
                return idx
        if isinstance(options, list):
            for i, opt in enumerate(options):
                if isinstance(opt, str) and opt.strip().lower() == s.lower():
                    return i
    elif isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _coerce_bool(value):
    if isinstance(value, str):
        s = value.strip().lower()
        if s in ("true", "t", "yes"):
            return True
        if s in ("false", "f", "no"):
            return False
    return value


def _coerce(item: dict, qtype: str) -> dict:
    """Patch common completion mistakes on a copy of *item*."""
    data = dict(item)
    data["type"] = qtype
    if qtype == "multiple-choice":
        options = data.get("options")
        if isinstance(options, list):
            options = [str(o) if isinstance(o, (int, float)) and not isinstance(o, bool) else o
                       for o in options]
            data["options"] = options
        data["correct"] = _coerce_mc_correct(data.get("correct"), options)
    elif qtype == "true-false":
        data["correct"] = _coerce_bool(data.get("correct"))
    elif qtype == "short-answer":
        kp = data.get("keyPoints")
        if isinstance(kp, str):
            data["keyPoints"] = [kp]
    elif qtype == "fill-blank":
        ans = data.get("answer")
        if isinstance(ans, (int, float)) and not isinstance(ans, bool):
            data["answer"] = str(ans)

    explanation = data.get("explanation")
    if not isinstance(explanation, str) or not explanation.strip():
        data["explanation"] = PLACEHOLDER_EXPLANATION
    return data


def parse_document(candidate: str):
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, TypeError) as e:
        raise ValidationError(
            ValidationError.MALFORMED, "Quiz document is not valid JSON", details=str(e)
        ) from e


def normalize(candidate: str, options: GenerationOptions | None = None) -> Quiz:
    """Parse *candidate* and keep every well-formed question.

    Malformed elements are dropped with a warning (recorded on
    ``Quiz.warnings``); the document itself must parse, contain a
    ``questions`` list and yield at least one question.
    """
    doc = parse_document(candidate)

    raw_questions = doc.get("questions") if isinstance(doc, dict) else None
    if not isinstance(raw_questions, list):
        raise ValidationError(
            ValidationError.MISSING_QUESTIONS,
            "Quiz document has no 'questions' list",
        )

    questions: list[Question] = []
    warnings: list[str] = []
    for i, item in enumerate(raw_questions):
        reason = None
        if not isinstance(item, dict):
            reason = f"expected object, got {type(item).__name__}"
        else:
            qtype = _canonical_type(item.get("type"))
            if qtype is None:
                reason = f"unknown question type {item.get('type')!r}"
            else:
                try:
                    q = question_from_dict(_coerce(item, qtype))
                except ValueError as e:
                    reason = f"{qtype}: {e}"
        if reason:
            msg = f"question {i + 1} dropped: {reason}"
            _log.warning(msg)
            warnings.append(msg)
            continue
        questions.append(q)

    if not questions:
        raise ValidationError(
            ValidationError.EMPTY_RESULT,
            "No valid questions found in quiz document",
            details="; ".join(warnings) or None,
        )

    questions = [_with_id(q) for q in questions]

    metadata = None
    if options is not None:
        metadata = QuizMetadata(
            generated_at=datetime.now(timezone.utc).isoformat(),
            difficulty=options.difficulty,
            subject=options.subject,
            grade_level=options.grade_level,
        )

    _log.info("Normalized %d/%d questions", len(questions), len(raw_questions))
    return Quiz(questions=tuple(questions), metadata=metadata, warnings=tuple(warnings))


def _with_id(q: Question) -> Question:
    return replace(q, id=uuid.uuid4().hex)
