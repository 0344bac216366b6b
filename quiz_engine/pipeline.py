"""Run content through prompt → completion → extraction → normalization → enhancement."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from quiz_engine.enhancer import enhance
from quiz_engine.errors import QuizEngineError
from quiz_engine.extractor import extract
from quiz_engine.grading import grade
from quiz_engine.models import GenerationOptions, Quiz, answers_from_wire
from quiz_engine.normalizer import normalize
from quiz_engine.prompts import DEFAULT_MIN_CONTENT_LENGTH, SYSTEM_PROMPT, build_prompt

if TYPE_CHECKING:
    from quiz_engine.config import Settings
    from quiz_engine.providers.base import LLMProvider

_log = logging.getLogger("quiz_engine.pipeline")


async def generate_quiz(
    llm: LLMProvider,
    content: str,
    options: GenerationOptions | Mapping,
    settings: Settings | None = None,
) -> Quiz:
    """Generate, validate and enhance a quiz for *content*.

    Invalid options fail before the completion service is called.  The
    completion call is made once; failures propagate as QuizEngineError
    subclasses (UpstreamError for the service itself).
    """
    if not isinstance(options, GenerationOptions):
        options = GenerationOptions.from_dict(options)
    min_length = settings.min_content_length if settings else DEFAULT_MIN_CONTENT_LENGTH
    prompt = build_prompt(content, options, min_content_length=min_length)

    kwargs: dict[str, Any] = {}
    if settings is not None:
        kwargs = {"temperature": settings.temperature, "max_tokens": settings.max_tokens}

    _log.info("Generating %d questions with %s", options.num_questions, llm.name())
    raw = await llm.generate(prompt, system=SYSTEM_PROMPT, **kwargs)

    candidate = extract(raw)
    quiz = enhance(normalize(candidate, options))
    if len(quiz) < options.num_questions:
        _log.warning("Requested %d questions, accepted %d", options.num_questions, len(quiz))
    else:
        _log.info("Generated %d questions successfully", len(quiz))
    return quiz


async def handle_generation_request(
    llm: LLMProvider,
    content: str,
    options: Mapping | GenerationOptions | None,
    settings: Settings | None = None,
) -> dict:
    """Generation entry point returning the success/failure envelope."""
    try:
        quiz = await generate_quiz(llm, content, options, settings)
    except QuizEngineError as e:
        _log.warning("Quiz generation failed (%s): %s", e.kind, e.message)
        return e.to_dict()
    body = quiz.to_dict()
    return {
        "success": True,
        "quiz": body["questions"],
        "metadata": body.get("metadata", {"numQuestions": len(quiz)}),
        "warnings": list(quiz.warnings),
    }


def handle_grading_request(quiz: Any, answers: Any) -> dict:
    """Grading entry point: accepts a Quiz or its wire form plus wire answers."""
    try:
        if not isinstance(quiz, Quiz):
            quiz = Quiz.from_dict(quiz)
        if not isinstance(answers, Mapping) or not all(isinstance(k, int) for k in answers):
            answers = answers_from_wire(answers)
        result = grade(quiz, answers)
    except QuizEngineError as e:
        _log.warning("Grading failed (%s): %s", e.kind, e.message)
        return e.to_dict()
    return {"success": True, "results": result.to_dict()}
