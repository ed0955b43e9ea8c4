"""Identifier whitelisting and form input validation."""

from .input_sanitizer import InputSanitizer
from .validation import InputValidator, Rule

__all__ = ["InputSanitizer", "InputValidator", "Rule"]
