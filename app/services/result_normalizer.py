"""Turn a model invocation outcome into a displayable result."""

import json
import logging
from typing import Callable, Optional

from app.services.model_invoker import (
    InvocationFailure,
    InvocationResult,
    InvocationSuccess,
)


logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 200


def strip_markdown_json(text: str) -> str:
    """Strip markdown code block wrappers from JSON text."""
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]
    return text.strip()


def parse_json_object(text: str) -> Optional[dict]:
    """
    Parse a possibly fenced JSON object out of model output.

    Returns None when the text is not valid JSON, nests too deeply to decode,
    or is valid JSON but not an object; all count as malformed output for
    structured requests.
    """
    try:
        parsed = json.loads(strip_markdown_json(text))
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def normalize_structured(
    outcome: InvocationResult, fallback: Callable[[], dict], label: str
) -> dict:
    """
    Parsed JSON object on success, otherwise the heuristic result.

    The parsed object is trusted as-is; only parse failure selects the fallback.
    """
    if isinstance(outcome, InvocationSuccess):
        parsed = parse_json_object(outcome.text)
        if parsed is not None:
            return parsed
        logger.warning(
            "Malformed JSON in %s response, using heuristic result: %r",
            label,
            outcome.text[:EXCERPT_LENGTH],
        )
    elif isinstance(outcome, InvocationFailure):
        logger.warning(
            "AI unavailable for %s (%s), using heuristic result", label, outcome.reason
        )
    return fallback()


def normalize_text(
    outcome: InvocationResult, fallback: Callable[[], str], label: str
) -> str:
    if isinstance(outcome, InvocationSuccess):
        return outcome.text
    logger.warning(
        "AI unavailable for %s (%s), using heuristic response", label, outcome.reason
    )
    return fallback()
