from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from quiz_engine.errors import InvalidOptions, ValidationError

DIFFICULTIES = ("beginner", "intermediate", "advanced", "mixed")
GRADE_LEVELS = ("elementary", "middle", "high", "college")
MIN_QUESTIONS = 1
MAX_QUESTIONS = 50


@dataclass(frozen=True)
class GenerationOptions:
    num_questions: int = 5
    difficulty: str = "intermediate"
    subject: str = "General"
    grade_level: str = "high"

    def __post_init__(self):
        n = self.num_questions
        if isinstance(n, bool) or not isinstance(n, int):
            raise InvalidOptions(f"numQuestions must be an integer (got {n!r})")
        if not MIN_QUESTIONS <= n <= MAX_QUESTIONS:
            raise InvalidOptions(
                f"numQuestions must be between {MIN_QUESTIONS} and {MAX_QUESTIONS} (got {n})"
            )
        if self.difficulty not in DIFFICULTIES:
            raise InvalidOptions(
                f"difficulty must be one of {', '.join(DIFFICULTIES)} (got {self.difficulty!r})"
            )
        if self.grade_level not in GRADE_LEVELS:
            raise InvalidOptions(
                f"gradeLevel must be one of {', '.join(GRADE_LEVELS)} (got {self.grade_level!r})"
            )
        if not isinstance(self.subject, str):
            raise InvalidOptions(f"subject must be a string (got {type(self.subject).__name__})")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> GenerationOptions:
        """Build from a request body, accepting wire (camelCase) or snake_case keys."""
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise InvalidOptions(f"options must be an object (got {type(data).__name__})")
        kwargs: dict[str, Any] = {}
        for wire, name in (
            ("numQuestions", "num_questions"),
            ("difficulty", "difficulty"),
            ("subject", "subject"),
            ("gradeLevel", "grade_level"),
        ):
            if wire in data:
                kwargs[name] = data[wire]
            elif name in data:
                kwargs[name] = data[name]
        # Form inputs post the count as a string
        n = kwargs.get("num_questions")
        if isinstance(n, str) and n.strip().isascii() and n.strip().isdigit():
            kwargs["num_questions"] = int(n.strip())
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {
            "numQuestions": self.num_questions,
            "difficulty": self.difficulty,
            "subject": self.subject,
            "gradeLevel": self.grade_level,
        }


# ── Questions ────────────────────────────────────────────────────────────
#
# One frozen dataclass per variant. ``from_dict`` is strict and raises
# ValueError with a readable reason; lenient coercion of completion output
# happens in the normalizer before these are called.


def _require_text(data: Mapping, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{key}' must be a non-empty string")
    return value


def _optional_text(data: Mapping, key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _common_dict(q) -> dict:
    return {"type": q.type, "question": q.question}


def _tail_dict(q, d: dict) -> dict:
    d["explanation"] = q.explanation
    if q.id:
        d["id"] = q.id
    if q.learning_objective:
        d["learningObjective"] = q.learning_objective
    return d


@dataclass(frozen=True)
class MultipleChoiceQuestion:
    type: ClassVar[str] = "multiple-choice"

    question: str
    options: tuple[str, ...]
    correct: int
    explanation: str
    id: str = ""
    learning_objective: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> MultipleChoiceQuestion:
        options = data.get("options")
        if not isinstance(options, (list, tuple)) or len(options) < 2:
            raise ValueError("'options' must be a list of at least 2 choices")
        if not all(isinstance(o, str) for o in options):
            raise ValueError("'options' entries must be strings")
        correct = data.get("correct")
        if isinstance(correct, bool) or not isinstance(correct, int):
            raise ValueError(f"'correct' must be an integer index (got {correct!r})")
        if not 0 <= correct < len(options):
            raise ValueError(f"'correct' index {correct} out of range for {len(options)} options")
        return cls(
            question=_require_text(data, "question"),
            options=tuple(options),
            correct=correct,
            explanation=_optional_text(data, "explanation"),
            id=_optional_text(data, "id"),
            learning_objective=_optional_text(data, "learningObjective"),
        )

    def expected(self) -> int:
        return self.correct

    def to_dict(self) -> dict:
        d = _common_dict(self)
        d["options"] = list(self.options)
        d["correct"] = self.correct
        return _tail_dict(self, d)


@dataclass(frozen=True)
class TrueFalseQuestion:
    type: ClassVar[str] = "true-false"

    question: str
    correct: bool
    explanation: str
    id: str = ""
    learning_objective: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> TrueFalseQuestion:
        correct = data.get("correct")
        if not isinstance(correct, bool):
            raise ValueError(f"'correct' must be a boolean (got {correct!r})")
        return cls(
            question=_require_text(data, "question"),
            correct=correct,
            explanation=_optional_text(data, "explanation"),
            id=_optional_text(data, "id"),
            learning_objective=_optional_text(data, "learningObjective"),
        )

    def expected(self) -> bool:
        return self.correct

    def to_dict(self) -> dict:
        d = _common_dict(self)
        d["correct"] = self.correct
        return _tail_dict(self, d)


@dataclass(frozen=True)
class ShortAnswerQuestion:
    type: ClassVar[str] = "short-answer"

    question: str
    sample_answer: str
    key_points: tuple[str, ...]
    explanation: str
    id: str = ""
    learning_objective: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> ShortAnswerQuestion:
        key_points = data.get("keyPoints")
        if not isinstance(key_points, (list, tuple)):
            raise ValueError("'keyPoints' must be a list of strings")
        points = tuple(p for p in key_points if isinstance(p, str) and p.strip())
        if not points:
            raise ValueError("'keyPoints' must contain at least one non-empty entry")
        return cls(
            question=_require_text(data, "question"),
            sample_answer=_optional_text(data, "sampleAnswer"),
            key_points=points,
            explanation=_optional_text(data, "explanation"),
            id=_optional_text(data, "id"),
            learning_objective=_optional_text(data, "learningObjective"),
        )

    def expected(self) -> list[str]:
        return list(self.key_points)

    def to_dict(self) -> dict:
        d = _common_dict(self)
        d["sampleAnswer"] = self.sample_answer
        d["keyPoints"] = list(self.key_points)
        return _tail_dict(self, d)


@dataclass(frozen=True)
class FillBlankQuestion:
    type: ClassVar[str] = "fill-blank"

    question: str
    answer: str
    explanation: str
    id: str = ""
    learning_objective: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> FillBlankQuestion:
        return cls(
            question=_require_text(data, "question"),
            answer=_require_text(data, "answer"),
            explanation=_optional_text(data, "explanation"),
            id=_optional_text(data, "id"),
            learning_objective=_optional_text(data, "learningObjective"),
        )

    def expected(self) -> str:
        return self.answer

    def to_dict(self) -> dict:
        d = _common_dict(self)
        d["answer"] = self.answer
        return _tail_dict(self, d)


Question = Union[MultipleChoiceQuestion, TrueFalseQuestion, ShortAnswerQuestion, FillBlankQuestion]

QUESTION_TYPES: dict[str, type] = {
    cls.type: cls
    for cls in (MultipleChoiceQuestion, TrueFalseQuestion, ShortAnswerQuestion, FillBlankQuestion)
}


def question_from_dict(data: Mapping) -> Question:
    """Dispatch on the ``type`` tag. Raises ValueError for unknown types or bad fields."""
    if not isinstance(data, Mapping):
        raise ValueError(f"question must be an object (got {type(data).__name__})")
    qtype = data.get("type")
    if not isinstance(qtype, str):
        raise ValueError(f"unknown question type {qtype!r}")
    cls = QUESTION_TYPES.get(qtype)
    if cls is None:
        raise ValueError(f"unknown question type {qtype!r}")
    return cls.from_dict(data)


# ── Quiz ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class QuizMetadata:
    generated_at: str | None = None
    difficulty: str | None = None
    subject: str | None = None
    grade_level: str | None = None

    def to_dict(self) -> dict:
        d = {
            "generatedAt": self.generated_at,
            "difficulty": self.difficulty,
            "subject": self.subject,
            "gradeLevel": self.grade_level,
        }
        return {k: v for k, v in d.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Mapping | None) -> QuizMetadata | None:
        if not isinstance(data, Mapping):
            return None
        return cls(
            generated_at=data.get("generatedAt"),
            difficulty=data.get("difficulty"),
            subject=data.get("subject"),
            grade_level=data.get("gradeLevel"),
        )


@dataclass(frozen=True)
class Quiz:
    questions: tuple[Question, ...]
    metadata: QuizMetadata | None = None
    warnings: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.questions)

    def __iter__(self):
        return iter(self.questions)

    def __getitem__(self, index: int) -> Question:
        return self.questions[index]

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"questions": [q.to_dict() for q in self.questions]}
        if self.metadata is not None:
            meta = self.metadata.to_dict()
            meta["numQuestions"] = len(self.questions)
            d["metadata"] = meta
        return d

    @classmethod
    def from_dict(cls, data: Any) -> Quiz:
        """Rebuild a quiz a caller sends back, e.g. with a grading request.

        Unlike the normalizer this is strict: any bad element rejects the
        whole document, since the input is expected to be canonical already.
        A bare list of questions is accepted as well as ``{"questions": [...]}``.
        """
        if isinstance(data, Mapping):
            raw_questions = data.get("questions")
            metadata = QuizMetadata.from_dict(data.get("metadata"))
        else:
            raw_questions = data
            metadata = None
        if not isinstance(raw_questions, (list, tuple)):
            raise ValidationError(ValidationError.MISSING_QUESTIONS, "quiz has no 'questions' list")
        questions = []
        for i, item in enumerate(raw_questions):
            try:
                questions.append(question_from_dict(item))
            except ValueError as e:
                raise ValidationError(ValidationError.MALFORMED, f"question {i + 1}: {e}") from e
        return cls(questions=tuple(questions), metadata=metadata)


# ── Answers and grading results ──────────────────────────────────────────


class _Unanswered:
    """Marker for an answer slot the learner left empty."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNANSWERED"

    def __bool__(self) -> bool:
        return False


UNANSWERED = _Unanswered()

AnswerSet = Mapping[int, Any]


def answers_from_wire(raw: Any) -> dict[int, Any]:
    """Convert request answers (list, or object keyed by index) into an AnswerSet.

    JSON ``null`` becomes ``UNANSWERED``.
    """
    if raw is None:
        return {}
    if isinstance(raw, (list, tuple)):
        items = enumerate(raw)
    elif isinstance(raw, Mapping):
        items = []
        for k, v in raw.items():
            try:
                items.append((int(k), v))
            except (TypeError, ValueError):
                raise ValidationError(
                    ValidationError.MALFORMED, f"answer key {k!r} is not a question index"
                ) from None
    else:
        raise ValidationError(
            ValidationError.MALFORMED, f"answers must be a list or object (got {type(raw).__name__})"
        )
    return {i: (UNANSWERED if v is None else v) for i, v in items}


@dataclass(frozen=True)
class Verdict:
    index: int
    question_id: str
    question_type: str
    correct: bool
    answered: bool
    submitted: Any
    expected: Any

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "id": self.question_id,
            "type": self.question_type,
            "correct": self.correct,
            "answered": self.answered,
            "submitted": self.submitted if self.answered else None,
            "expected": self.expected,
        }


@dataclass(frozen=True)
class GradeResult:
    verdicts: tuple[Verdict, ...]
    score: int
    total: int
    percent: int
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "perQuestion": [v.to_dict() for v in self.verdicts],
            "score": self.score,
            "total": self.total,
            "percent": self.percent,
            "message": self.message,
        }
