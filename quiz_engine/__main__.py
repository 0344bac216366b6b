"""CLI entry point for quiz-engine.

Usage:
  python -m quiz_engine serve [--host HOST] [--port PORT]
  python -m quiz_engine generate FILE [--num N] [--difficulty D] [--subject S] [--grade G]
"""
from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "generate":
        _generate(args[1:])
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, generate")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _serve(args: list[str]):
    import uvicorn

    from quiz_engine.config import load_settings

    settings = load_settings()
    port = int(_parse_flag(args, "--port", str(settings.port)))
    host = _parse_flag(args, "--host", settings.host)

    print(f"Starting Quiz Engine on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    uvicorn.run(
        "quiz_engine.app:app",
        host=host,
        port=port,
        reload=False,
        timeout_graceful_shutdown=5,
    )


def _generate(args: list[str]):
    if not args or args[0].startswith("--"):
        print("Usage: generate FILE [--num N] [--difficulty D] [--subject S] [--grade G]")
        sys.exit(1)

    from quiz_engine.config import load_settings
    from quiz_engine.errors import QuizEngineError
    from quiz_engine.pipeline import generate_quiz
    from quiz_engine.providers import get_llm

    path = Path(args[0])
    if not path.exists():
        print(f"File not found: {path}")
        sys.exit(1)
    content = path.read_text()

    options = {
        "numQuestions": _parse_flag(args, "--num", "5"),
        "difficulty": _parse_flag(args, "--difficulty", "intermediate"),
        "subject": _parse_flag(args, "--subject", "General"),
        "gradeLevel": _parse_flag(args, "--grade", "high"),
    }

    settings = load_settings()
    if not settings.api_key_configured:
        print(f"No API key configured for {settings.llm_provider}.")
        sys.exit(1)

    print(f"Generating {options['numQuestions']} questions using {settings.llm_provider}...",
          file=sys.stderr)
    try:
        quiz = asyncio.run(generate_quiz(get_llm(settings), content, options, settings))
    except QuizEngineError as e:
        print(f"Error ({e.kind}): {e.message}", file=sys.stderr)
        if e.details:
            print(f"  {e.details}", file=sys.stderr)
        sys.exit(1)

    for w in quiz.warnings:
        print(f"  warning: {w}", file=sys.stderr)
    print(json.dumps(quiz.to_dict(), indent=2))


if __name__ == "__main__":
    main()
