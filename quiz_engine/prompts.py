"""Prompt templates for quiz generation."""
from __future__ import annotations

from collections.abc import Mapping

from quiz_engine.errors import InvalidOptions
from quiz_engine.models import GenerationOptions

DEFAULT_MIN_CONTENT_LENGTH = 100

SYSTEM_PROMPT = (
    "You are an expert educational content creator. "
    "Generate quiz questions in valid JSON format only."
)

QUIZ_PROMPT = """\
You are an expert educational content creator. Generate exactly {num_questions} \
diverse quiz questions from the following content.

CONTENT:
{content}

REQUIREMENTS:
- Number of questions: {num_questions}
- Difficulty level: {difficulty}
- Subject area: {subject}
- Grade level: {grade_level}
- Question types: Mix of multiple-choice, true-false, short-answer, and fill-blank
- Each question must test important concepts from the content
- Provide clear, educational explanations

OUTPUT FORMAT (MUST BE VALID JSON):
{{
  "questions": [
    {{
      "type": "multiple-choice",
      "question": "Question text here?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correct": 2,
      "explanation": "Detailed explanation of why this answer is correct"
    }},
    {{
      "type": "true-false",
      "question": "Statement to evaluate",
      "correct": true,
      "explanation": "Explanation of the correct answer"
    }},
    {{
      "type": "short-answer",
      "question": "Question requiring explanation?",
      "sampleAnswer": "A model answer in 2-3 sentences",
      "keyPoints": ["keyword1", "keyword2", "keyword3"],
      "explanation": "What makes a good answer"
    }},
    {{
      "type": "fill-blank",
      "question": "The _____ occurred in _____.",
      "answer": "correct phrase or word",
      "explanation": "Context and explanation"
    }}
  ]
}}

IMPORTANT:
- Return ONLY valid JSON, no other text
- "correct" for multiple-choice is the 0-based index into "options"
- "correct" for true-false is a JSON boolean (true or false)
- Ensure all questions are directly based on the provided content
- Make questions challenging but fair
- Distribute question types evenly
- Test different cognitive levels (recall, understanding, application, analysis)
"""


def build_prompt(
    content: str,
    options: GenerationOptions | Mapping,
    min_content_length: int = DEFAULT_MIN_CONTENT_LENGTH,
) -> str:
    """Render the instruction string for the completion service.

    Raises InvalidOptions before anything is sent if the content is too short
    or an option is out of range.
    """
    if not isinstance(content, str):
        raise InvalidOptions("Content must be a string")
    if len(content.strip()) < min_content_length:
        raise InvalidOptions(f"Content must be at least {min_content_length} characters long")
    if not isinstance(options, GenerationOptions):
        options = GenerationOptions.from_dict(options)

    return QUIZ_PROMPT.format(
        num_questions=options.num_questions,
        content=content,
        difficulty=options.difficulty,
        subject=options.subject,
        grade_level=options.grade_level,
    )
