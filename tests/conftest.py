"""Shared test fixtures."""
from __future__ import annotations

import json

import pytest

from quiz_engine.models import (
    FillBlankQuestion,
    GenerationOptions,
    MultipleChoiceQuestion,
    Quiz,
    ShortAnswerQuestion,
    TrueFalseQuestion,
)


@pytest.fixture
def sample_content():
    """Educational text comfortably above the minimum content length."""
    return (
        "Photosynthesis is the process by which green plants use sunlight to "
        "synthesize food from carbon dioxide and water. It takes place mainly in "
        "the chloroplasts of leaf cells and releases oxygen as a by-product. "
        "Cellular respiration, which happens in the mitochondria, later releases "
        "the energy stored in glucose."
    )


@pytest.fixture
def sample_options():
    return GenerationOptions(
        num_questions=4,
        difficulty="intermediate",
        subject="Biology",
        grade_level="middle",
    )


@pytest.fixture
def sample_document():
    """A well-formed quiz document with one question of each type."""
    return {
        "questions": [
            {
                "type": "multiple-choice",
                "question": "Where does photosynthesis mainly take place?",
                "options": ["Mitochondria", "Chloroplasts", "Nucleus", "Ribosomes"],
                "correct": 1,
                "explanation": "Chloroplasts contain chlorophyll.",
            },
            {
                "type": "true-false",
                "question": "Photosynthesis releases oxygen",
                "correct": True,
                "explanation": "Oxygen is a by-product.",
            },
            {
                "type": "short-answer",
                "question": "How do cells get energy from glucose?",
                "sampleAnswer": "Cellular respiration in the mitochondria releases energy.",
                "keyPoints": ["mitochondria", "energy"],
                "explanation": "Respiration releases stored energy.",
            },
            {
                "type": "fill-blank",
                "question": "Green plants make food through _____.",
                "answer": "photosynthesis",
                "explanation": "Photosynthesis converts light into chemical energy.",
            },
        ]
    }


@pytest.fixture
def sample_document_json(sample_document):
    return json.dumps(sample_document, indent=2)


@pytest.fixture
def sample_quiz():
    """An already-normalized quiz with fixed ids."""
    return Quiz(questions=(
        MultipleChoiceQuestion(
            question="Which letter is third?",
            options=("A", "B", "C", "D"),
            correct=2,
            explanation="C is the third letter.",
            id="q1",
        ),
        TrueFalseQuestion(
            question="The sky is blue.",
            correct=True,
            explanation="Rayleigh scattering.",
            id="q2",
        ),
        ShortAnswerQuestion(
            question="How do cells produce energy?",
            sample_answer="Mitochondria produce ATP.",
            key_points=("mitochondria", "energy"),
            explanation="Cellular respiration.",
            id="q3",
        ),
        FillBlankQuestion(
            question="Plants make food by _____.",
            answer="photosynthesis",
            explanation="Light to chemical energy.",
            id="q4",
        ),
    ))
