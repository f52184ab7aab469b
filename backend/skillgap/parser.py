# skillgap/parser.py
# ─────────────────────────────────────────────────────────────────────────────
# Model reply -> typed result.
#
# The model is asked for bare JSON but often wraps it in a ``` fence; that is
# tolerated. Anything else (prose preamble, truncated output, wrong types,
# out-of-range values) rejects the whole reply. No partial results.
# ─────────────────────────────────────────────────────────────────────────────

import json
import logging
import re
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError as SchemaValidationError

from exceptions import ParseError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_LEADING_FENCE  = re.compile(r"\A```[A-Za-z0-9_-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```\Z")


def strip_code_fences(raw: str) -> str:
    """Strip one leading and one trailing ``` marker plus surrounding whitespace."""
    text = raw.strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def decode_json(raw: str) -> dict:
    if raw is None:
        raise ParseError("empty response")

    cleaned = strip_code_fences(raw)
    if not cleaned:
        raise ParseError("empty response", raw=raw)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("Model reply is not valid JSON: %s\nRaw: %s", e, raw[:500])
        raise ParseError(f"invalid JSON ({e.msg} at line {e.lineno} column {e.colno})", raw=raw) from e

    if not isinstance(parsed, dict):
        raise ParseError(f"expected a JSON object, got {type(parsed).__name__}", raw=raw)
    return parsed


def parse_model_response(raw: str, schema: Type[T]) -> T:
    """Decode `raw` and validate it against `schema`; raise ParseError on any mismatch."""
    data = decode_json(raw)
    try:
        return schema.model_validate(data)
    except SchemaValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "<root>"
        logger.error(
            "Model reply does not match %s (%d errors, first at %s: %s)",
            schema.__name__, e.error_count(), location, first["msg"],
        )
        raise ParseError(f"{schema.__name__} mismatch at {location}: {first['msg']}", raw=raw) from e
