"""FastAPI application: health, quiz generation and grading routes."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quiz_engine.config import Settings, load_settings
from quiz_engine.pipeline import handle_generation_request, handle_grading_request
from quiz_engine.providers import get_llm

app = FastAPI(title="Quiz Engine")

log = logging.getLogger("quiz_engine.app")

_settings: Settings | None = None

# HTTP status per error kind; upstream errors reuse the service's status
STATUS_BY_KIND = {
    "invalid-options": 400,
    "extraction-error": 502,
    "validation-error": 502,
    "grading-error": 400,
}


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def _get_llm():
    return get_llm(get_settings())


def _status_for(body: dict) -> int:
    if body.get("error") == "upstream-error":
        return body.get("status") or 502
    return STATUS_BY_KIND.get(body.get("error"), 500)


async def _read_json(request: Request) -> dict | None:
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return body if isinstance(body, dict) else None


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "invalid-request", "message": message, "details": None},
    )


@app.on_event("startup")
async def startup():
    s = get_settings()
    log.info("Provider: %s (%s)", s.llm_provider, s.llm_model)
    if not s.api_key_configured:
        log.warning("No API key found for %s; quiz generation will fail", s.llm_provider)


# ── API: Health ──────────────────────────────────────────────────────────

@app.get("/api/health")
async def api_health():
    s = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "provider": s.llm_provider,
        "apiKeyConfigured": s.api_key_configured,
    }


# ── API: Generate quiz ───────────────────────────────────────────────────

@app.post("/api/generate-quiz")
async def api_generate_quiz(request: Request):
    body = await _read_json(request)
    if body is None:
        return _bad_request("Request body must be a JSON object")

    s = get_settings()
    if not s.api_key_configured:
        return JSONResponse(status_code=500, content={
            "success": False,
            "error": "configuration-error",
            "message": f"Server not configured: {s.llm_provider} API key missing",
            "details": None,
        })

    result = await handle_generation_request(
        _get_llm(), body.get("content", ""), body.get("options"), s,
    )
    if not result["success"]:
        return JSONResponse(status_code=_status_for(result), content=result)
    return result


# ── API: Grade ───────────────────────────────────────────────────────────

@app.post("/api/grade")
async def api_grade(request: Request):
    body = await _read_json(request)
    if body is None:
        return _bad_request("Request body must be a JSON object")
    if "quiz" not in body:
        return _bad_request("Missing 'quiz'")

    result = handle_grading_request(body["quiz"], body.get("answers"))
    if not result["success"]:
        status = 400 if result["error"] == "validation-error" else _status_for(result)
        return JSONResponse(status_code=status, content=result)
    return result
