"""Centralized Gemini client — schema-constrained JSON generation.

All trend-agent calls MUST go through `call_structured_generation()`.
This ensures:
  - Model and timeout are read from env.
  - JSON output is requested via response_mime_type + response_schema.
  - Exactly one attempt per call (no retry), the transport timeout only.
  - Failures surface as typed errors: GenerationFailed for transport /
    backend problems, MalformedResponse when the call succeeded but the
    text is not valid JSON.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from typing import Any, Dict, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants — all read from environment with safe defaults
# ---------------------------------------------------------------------------
CONTEXT_REPORT = "report"
CONTEXT_SECTOR = "sector"
CONTEXT_PRODUCT = "product"

_CONTEXT_LABELS = {
    CONTEXT_REPORT: "report",
    CONTEXT_SECTOR: "sector analysis",
    CONTEXT_PRODUCT: "product analysis",
}


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def get_gemini_key() -> str:
    """Read GEMINI_API_KEY (or API_KEY) from the environment. Empty string if unset."""
    return (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()


def get_gemini_model() -> str:
    """Read GEMINI_MODEL from the environment (default: gemini-2.5-flash)."""
    return os.getenv("GEMINI_MODEL", "gemini-2.5-flash").strip()


def _get_timeout() -> float:
    return _env_float("GEMINI_REQUEST_TIMEOUT", 60.0)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
class GenerationError(Exception):
    """Base class for generation errors. ``context`` is report / sector / product."""

    kind = "generationFailed"

    def __init__(self, context: str, detail: str = "") -> None:
        self.context = context
        self.detail = detail
        label = _CONTEXT_LABELS.get(context, context)
        super().__init__(f"{self._summary(label)}: {detail}" if detail else self._summary(label))

    def _summary(self, label: str) -> str:
        return f"Could not generate the {label}"


class GenerationFailed(GenerationError):
    """Transport or backend failure (network, auth, quota, empty output)."""


class MalformedResponse(GenerationError):
    """The call succeeded but the output does not match the expected contract."""

    kind = "malformedResponse"

    def _summary(self, label: str) -> str:
        return f"The {label} returned by the model is malformed"


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------
_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def extract_json_text(raw: str) -> str:
    """Trim model output and strip a BOM or a surrounding markdown fence.

    The payload itself is left untouched: truncated or otherwise broken JSON
    must fail to parse rather than be patched up.
    """
    text = (raw or "").strip().lstrip("\ufeff").strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1).strip()
    return text


def parse_json_payload(raw: str, context: str) -> Any:
    """Parse model output as JSON. Raises MalformedResponse on failure."""
    text = extract_json_text(raw)
    if not text:
        raise MalformedResponse(context, "empty JSON text")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"❌ [GEMINI] JSON parse failed: {exc}")
        print(f"⚠️  [GEMINI] Raw (first 300 chars): {text[:300]}")
        raise MalformedResponse(context, str(exc)) from exc


# ---------------------------------------------------------------------------
# Request config
# ---------------------------------------------------------------------------
def build_generation_config(
    *,
    schema: Dict[str, Any],
    temperature: Optional[float],
) -> types.GenerateContentConfig:
    """Generation config with JSON output enforced by schema."""
    return types.GenerateContentConfig(
        response_mime_type="application/json",
        response_schema=schema,
        temperature=temperature,
    )


def _make_client(api_key: str) -> genai.Client:
    timeout_ms = int(_get_timeout() * 1000)
    return genai.Client(api_key=api_key, http_options=types.HttpOptions(timeout=timeout_ms))


def _log_usage(response: Any) -> None:
    usage = getattr(response, "usage_metadata", None)
    if usage is None:
        return
    print(
        f"🧠 [GEMINI] Tokens used: prompt={usage.prompt_token_count}, "
        f"completion={usage.candidates_token_count}, total={usage.total_token_count}"
    )


def _block_reason(response: Any) -> Optional[str]:
    feedback = getattr(response, "prompt_feedback", None)
    reason = getattr(feedback, "block_reason", None) if feedback is not None else None
    if reason is None:
        return None
    return getattr(reason, "value", None) or str(reason)


# ---------------------------------------------------------------------------
# Call
# ---------------------------------------------------------------------------
async def call_structured_generation(
    *,
    prompt: str,
    schema: Dict[str, Any],
    context: str,
    temperature: Optional[float] = None,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
) -> Any:
    """Call Gemini once and return the parsed JSON payload.

    Parameters
    ----------
    prompt : str
        Natural-language instruction.
    schema : dict
        ``response_schema`` type descriptor.
    context : str
        One of report / sector / product, carried by raised errors.
    temperature : float, optional
        Sampling temperature; left to the model default when None.
    model : str, optional
        Override model name (default: from env).
    api_key : str, optional
        Override API key (default: from env).

    Raises
    ------
    GenerationFailed
        Missing key, API error, transport error or empty output.
    MalformedResponse
        Output text is not valid JSON.
    """
    if api_key is None:
        api_key = get_gemini_key()
    if not api_key:
        print("⚠️  [GEMINI] API key missing (GEMINI_API_KEY)")
        raise GenerationFailed(context, "GEMINI_API_KEY environment variable not set")
    if model is None:
        model = get_gemini_model()

    client = _make_client(api_key)
    config = build_generation_config(schema=schema, temperature=temperature)

    print(f"🧠 [GEMINI] Calling {model} for {context} (temperature={temperature})")
    t0 = time.time()
    try:
        response = await client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=config,
        )
    except genai_errors.APIError as exc:
        duration = time.time() - t0
        logger.warning("Gemini %s call failed with %s after %.1fs: %s", context, exc.code, duration, exc.message)
        raise GenerationFailed(context, f"HTTP {exc.code}") from exc
    except httpx.HTTPError as exc:
        duration = time.time() - t0
        print(f"❌ [GEMINI] Transport error after {duration:.1f}s: {exc}")
        raise GenerationFailed(context, f"transport error: {exc}") from exc

    duration = time.time() - t0
    print(f"📦 [GEMINI] Response received ({duration:.1f}s)")
    _log_usage(response)

    raw_text = (response.text or "").strip()
    print(f"🧠 [GEMINI] Raw output length: {len(raw_text)} chars")
    if not raw_text:
        reason = _block_reason(response)
        raise GenerationFailed(context, f"empty response{f' ({reason})' if reason else ''}")

    parsed = parse_json_payload(raw_text, context)
    print("🧠 [GEMINI] Success")
    return parsed
