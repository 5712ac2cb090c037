"""JSON parsing utilities for structured value casting."""

from __future__ import annotations

import json
from typing import Any

from .errors import CastError


def parse_json_if_needed(value: str | bytes | Any) -> Any:
    """Parse JSON text if the value is a string or bytes.

    Args:
        value: The value to potentially parse as JSON

    Returns:
        The parsed JSON object, or the original value if it is not text

    Raises:
        CastError: If the value is text but cannot be parsed as JSON
    """
    if isinstance(value, (str, bytes, bytearray)):
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise CastError(f"Invalid JSON: {e.msg} at position {e.pos}", value) from e
        except UnicodeDecodeError as e:
            raise CastError(f"Failed to decode JSON bytes: {e.reason}", value) from e
    return value
