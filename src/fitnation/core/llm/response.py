"""Response cleanup and guardrail enforcement for generated content."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class GuardrailCheck:
    """Result of checking generated text against the content guardrails."""

    passed: bool
    flags: list[str] = field(default_factory=list)


# Phrases that turn coaching tips into medical or unsafe dieting advice.
PROHIBITED_INDICATORS: dict[str, tuple[str, ...]] = {
    "making medical diagnoses": (
        "you have been diagnosed",
        "you are suffering from",
        "you have a condition",
    ),
    "prescribing treatments": (
        "take this medication",
        "stop taking your medication",
        "i prescribe",
    ),
    "recommending unsafe restriction": (
        "skip meals",
        "stop eating",
        "eat nothing",
        "fast for several days",
    ),
}

_MARKUP_PATTERNS = (
    (re.compile(r"\*+"), ""),
    (re.compile(r"^#{1,6}\s*", re.MULTILINE), ""),
    (re.compile(r"^\s*[-•]\s+", re.MULTILINE), ""),
    (re.compile(r"`+"), ""),
    (re.compile(r"__"), ""),
)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def strip_markup(content: str) -> str:
    """Reduce LLM output to plain prose: no asterisks, headings or bullets."""
    text = content
    for pattern, replacement in _MARKUP_PATTERNS:
        text = pattern.sub(replacement, text)
    return text.strip()


def extract_json_object(content: str) -> Any:
    """Pull the first JSON object out of an LLM response.

    Handles bare JSON, fenced ```json blocks, and prose around a single
    top-level object.

    Raises:
        ValueError: if no JSON object can be decoded.
    """
    text = content.strip()
    fenced = _FENCE_RE.search(text)
    if fenced:
        text = fenced.group(1).strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("No JSON object found in response")
    try:
        return json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise ValueError(f"Response JSON could not be decoded: {exc}") from exc


def check_guardrails(content: str) -> GuardrailCheck:
    """Flag prohibited phrases in generated text."""
    flags: list[str] = []
    content_lower = content.lower()

    for action, patterns in PROHIBITED_INDICATORS.items():
        for pattern in patterns:
            if pattern in content_lower:
                flags.append(f"prohibited_pattern_detected: {action} ('{pattern}')")

    if flags:
        logger.warning("Guardrail flags on generated content: %s", flags)
    return GuardrailCheck(passed=not flags, flags=flags)


def sanitize_content(content: str, guardrail_check: GuardrailCheck) -> str:
    """Redact sentences that contain a flagged phrase.

    If the guardrail check passed, content is returned unchanged.
    """
    if guardrail_check.passed:
        return content

    prohibited_phrases: list[str] = []
    for flag in guardrail_check.flags:
        match = re.search(r"\('([^']+)'\)", flag)
        if match:
            prohibited_phrases.append(match.group(1))

    sanitized = content
    for phrase in prohibited_phrases:
        pattern = re.compile(
            r"[^.!?\n]*" + re.escape(phrase) + r"[^.!?\n]*[.!?]?",
            re.IGNORECASE,
        )
        sanitized = pattern.sub("[Removed: unsafe health guidance]", sanitized)
    return sanitized
