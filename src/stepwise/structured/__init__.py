"""Structured value casting - typed parse stages backed by pydantic."""

from .casting import cast
from .errors import CastError
from .parser import parse_json_if_needed

__all__ = [
    "CastError",
    "cast",
    "parse_json_if_needed",
]
