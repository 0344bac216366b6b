"""Error taxonomy for quiz generation and grading."""
from __future__ import annotations

UPSTREAM_MESSAGES = {
    401: "Invalid API key",
    403: "API key does not have access. Check your account billing.",
    429: "Rate limit exceeded. Please try again in a moment.",
}


class QuizEngineError(Exception):
    """Base class: every failure has a machine-checkable kind and a readable message."""

    kind = "quiz-engine-error"

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": self.kind,
            "message": self.message,
            "details": self.details,
        }


class InvalidOptions(QuizEngineError):
    kind = "invalid-options"


class ExtractionError(QuizEngineError):
    kind = "extraction-error"

    def __init__(self, reason: str = "no-parseable-document", details: str | None = None):
        super().__init__("Could not find a JSON quiz document in the completion", details)
        self.reason = reason

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["reason"] = self.reason
        return d


class ValidationError(QuizEngineError):
    """Document found but unusable.

    ``validation_kind`` is one of ``malformed``, ``missing-questions`` or
    ``empty-result``.
    """

    kind = "validation-error"

    MALFORMED = "malformed"
    MISSING_QUESTIONS = "missing-questions"
    EMPTY_RESULT = "empty-result"

    def __init__(self, validation_kind: str, message: str, details: str | None = None):
        super().__init__(message, details)
        self.validation_kind = validation_kind

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["reason"] = self.validation_kind
        return d


class GradingError(QuizEngineError):
    kind = "grading-error"

    EMPTY_QUIZ = "empty-quiz"

    def __init__(self, grading_kind: str, message: str):
        super().__init__(message)
        self.grading_kind = grading_kind

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["reason"] = self.grading_kind
        return d


class UpstreamError(QuizEngineError):
    """Completion service failure, passed through with its status when known."""

    kind = "upstream-error"

    def __init__(self, status: int | None = None, details: str | None = None, message: str | None = None):
        if message is None:
            message = UPSTREAM_MESSAGES.get(status, "Failed to generate quiz")
        super().__init__(message, details)
        self.status = status

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["status"] = self.status
        return d
