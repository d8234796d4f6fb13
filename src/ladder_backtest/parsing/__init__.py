"""Bot log parsing: raw text lines to typed log events."""

from .classifier import classify_line, classify_lines, parse_timestamp

__all__ = ["classify_line", "classify_lines", "parse_timestamp"]
