"""Public parsing API."""

from .parser import parse_events, parse_file, parse_string, records_as_dicts

__all__ = [
    "parse_events",
    "parse_file",
    "parse_string",
    "records_as_dicts",
]
