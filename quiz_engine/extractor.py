"""Pull a JSON quiz document out of raw completion text.

The completion service is told to answer with JSON only, but often wraps the
document in prose or markdown fences, or adds commentary after it.  Each
strategy below yields candidate substrings; ``extract`` returns the first one
that parses as a JSON object or array.
"""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Iterator

from quiz_engine.errors import ExtractionError

_log = logging.getLogger("quiz_engine.extractor")

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)
_JSON_FENCE_RE = re.compile(r"```[ \t]*json[ \t]*\n?(.*?)```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE_RE = re.compile(r"```[^\n`]*\n?(.*?)```", re.DOTALL)


def whole_text(text: str) -> Iterator[str]:
    yield text


def json_fence(text: str) -> Iterator[str]:
    """Interior of each ```json fenced block, in order."""
    for m in _JSON_FENCE_RE.finditer(text):
        yield m.group(1).strip()


def any_fence(text: str) -> Iterator[str]:
    """Interior of each fenced block regardless of its language tag."""
    for m in _ANY_FENCE_RE.finditer(text):
        yield m.group(1).strip()


def balanced_object(text: str) -> Iterator[str]:
    """Top-level ``{…}`` runs, found by depth counting.

    Braces and brackets inside string literals are ignored, so trailing
    commentary after the closing brace never ends up in the candidate.
    """
    i = 0
    n = len(text)
    while i < n:
        start = text.find("{", i)
        if start < 0:
            return
        end = _match_close(text, start)
        if end is None:
            # Unbalanced, try the next opening brace
            i = start + 1
            continue
        yield text[start : end + 1]
        i = end + 1


def _match_close(text: str, start: int) -> int | None:
    depth = 0
    in_str = False
    escape = False
    for j in range(start, len(text)):
        ch = text[j]
        if in_str:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth == 0:
                return j if ch == "}" else None
            if depth < 0:
                return None
    return None


STRATEGIES: list[tuple[str, Callable[[str], Iterator[str]]]] = [
    ("whole-text", whole_text),
    ("json-fence", json_fence),
    ("any-fence", any_fence),
    ("balanced-object", balanced_object),
]


def is_parseable(candidate: str) -> bool:
    """True if *candidate* is a syntactically valid JSON object or array."""
    try:
        doc = json.loads(candidate)
    except (json.JSONDecodeError, TypeError):
        return False
    return isinstance(doc, (dict, list))


def extract(raw: str) -> str:
    """Return the first candidate document found in *raw*.

    ``<think>…</think>`` reasoning blocks are dropped first, since they often
    hold draft JSON.  Raises ExtractionError if no strategy produces a
    parseable candidate.
    """
    if not isinstance(raw, str):
        raise ExtractionError(details=f"completion is {type(raw).__name__}, not text")
    text = _THINK_RE.sub("", raw) if "<think>" in raw else raw

    for name, strategy in STRATEGIES:
        for candidate in strategy(text):
            if is_parseable(candidate):
                _log.debug("Extracted document via %s (%d chars)", name, len(candidate))
                return candidate

    _log.warning("No parseable document in completion: %.200r", raw)
    raise ExtractionError(details=f"{len(raw)} chars of completion text, none parseable")
