from __future__ import annotations

import json
import logging
from typing import Any

from syllabuild.core.errors import MalformedOutputError

logger = logging.getLogger(__name__)


def parse_json_leniently(raw: str) -> Any:
    """
    Parse model output that should be JSON but may be wrapped in prose or fences.

    Strict parse first. On failure, the span from the first '{' to the last '}'
    in the whole string is parsed instead. There is no bracket balancing: a
    response holding several independent objects, or stray braces in the
    surrounding prose, yields a span that is wrong or unparsable.

    Raises MalformedOutputError when neither attempt produces JSON. The raw
    output is never included in the error message.
    """
    if not raw or not isinstance(raw, str):
        raise MalformedOutputError("Empty model response.")

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass

    start = raw.find("{")
    end = raw.rfind("}")
    if start < 0 or end <= start:
        raise MalformedOutputError()

    try:
        parsed = json.loads(raw[start : end + 1])
    except json.JSONDecodeError as e:
        logger.warning(f"Brace-span fallback failed ({len(raw)} chars): {e}")
        raise MalformedOutputError() from e

    logger.info("Recovered JSON object from wrapped model output")
    return parsed
