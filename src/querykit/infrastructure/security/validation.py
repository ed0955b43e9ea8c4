"""
Input validation rules for submitted form data.

Rules are declared per field as pipe-separated strings::

    validator = InputValidator(
        {
            "email": "required|format:email|unique:users",
            "password": "required|min:8|max:72",
            "confirm": "required|matches:password",
        },
        db=db,
    )
    if not validator.run(form_data):
        return validator.errors

Each rule name maps to a ``Rule`` member, and each member to a handler
function in ``RULE_HANDLERS``. A handler returns an error message, or None if
the value passes. Fields that are not ``required`` and were left blank skip
their other rules.
"""

import logging
import re
import urllib.parse
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from querykit.application.interfaces.exceptions import ConfigurationError

if TYPE_CHECKING:
    from querykit.infrastructure.database.database import Database

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
DATE_PATTERN = re.compile(r"[0-9]{4}-(0[0-9]|1[0-2])-(0[0-9]|[12][0-9]|3[01])")
NUMERIC_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class Rule(Enum):
    REQUIRED = "required"
    UNIQUE = "unique"
    FORMAT = "format"
    MIN = "min"
    MAX = "max"
    MATCHES = "matches"


FORMATS = frozenset({"email", "date", "numeric", "int", "float", "url"})

# Allowed argument counts per rule (inclusive)
RULE_ARITY: dict[Rule, tuple[int, int]] = {
    Rule.REQUIRED: (0, 0),
    Rule.UNIQUE: (1, 3),
    Rule.FORMAT: (1, 1),
    Rule.MIN: (1, 1),
    Rule.MAX: (1, 1),
    Rule.MATCHES: (1, 1),
}


@dataclass(frozen=True)
class RuleSpec:
    rule: Rule
    args: tuple[str, ...] = ()


def parse_rules(rules: str) -> list[RuleSpec]:
    """
    Parse ``"min:6|max:10"`` into rule specs.

    Raises:
        ConfigurationError: For unknown rules, wrong argument counts, unknown
            formats, or non-numeric min/max bounds
    """
    specs = []
    for part in filter(None, (p.strip() for p in rules.split("|"))):
        name, _, raw_args = part.partition(":")
        try:
            rule = Rule(name.strip().lower())
        except ValueError as e:
            raise ConfigurationError(f"Unknown validation rule: {name!r}", e) from e

        args = tuple(a.strip() for a in raw_args.split(",")) if raw_args else ()
        low, high = RULE_ARITY[rule]
        if not low <= len(args) <= high:
            raise ConfigurationError(f"Rule {rule.value!r} takes {low}-{high} argument(s), got {len(args)}")
        if rule is Rule.FORMAT and args[0] not in FORMATS:
            raise ConfigurationError(f"Unknown format: {args[0]!r}")
        if rule in (Rule.MIN, Rule.MAX) and not is_numeric(args[0]):
            raise ConfigurationError(f"Rule {rule.value!r} needs a numeric bound, got {args[0]!r}")

        specs.append(RuleSpec(rule, args))
    return specs


def is_numeric(value: Any) -> bool:
    """True for ints, floats and numeric strings; bools are not numbers here."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and NUMERIC_PATTERN.fullmatch(value.strip()) is not None


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, set, dict)):
        return not value
    return str(value).strip() == ""


def _format_bound(bound: float) -> str:
    return str(int(bound)) if bound == int(bound) else str(bound)


def check_required(validator: "InputValidator", field: str, data: Mapping[str, Any]) -> str | None:
    return "Required." if is_blank(data.get(field)) else None


def check_unique(
    validator: "InputValidator",
    field: str,
    data: Mapping[str, Any],
    table: str,
    primary_key: str | None = None,
    ignore_key: str | None = None,
) -> str | None:
    if validator.db is None:
        raise ConfigurationError(f"Rule 'unique' on {field!r} needs a database")

    query = validator.db.table(table).where(field, data.get(field))
    if primary_key and ignore_key is not None:
        query.where(primary_key, "!=", ignore_key)
    if query.count() > 0:
        return "Already taken."
    return None


def check_format(validator: "InputValidator", field: str, data: Mapping[str, Any], fmt: str) -> str | None:
    value = data.get(field)
    text = "" if value is None else str(value).strip()

    if fmt == "email" and not EMAIL_PATTERN.fullmatch(text):
        return "Invalid email."
    if fmt == "date" and not DATE_PATTERN.fullmatch(text):
        return "Invalid date format (YYYY-MM-DD)."
    if fmt == "numeric" and not is_numeric(value):
        return "Must be a number."
    if fmt == "int" and (not is_numeric(value) or not float(value).is_integer()):
        return "Must be an integer."
    if fmt == "float" and (not is_numeric(value) or float(value).is_integer()):
        return "Must be a float."
    if fmt == "url":
        parsed = urllib.parse.urlparse(text)
        if parsed.scheme not in ("http", "https", "ftp") or not parsed.netloc:
            return "Invalid URL."
    return None


def check_min(validator: "InputValidator", field: str, data: Mapping[str, Any], bound: str) -> str | None:
    value = data.get(field)
    limit = float(bound)
    shown = _format_bound(limit)

    if is_numeric(value):
        if float(value) < limit:
            return f"Must not be less than {shown}."
    elif isinstance(value, (list, tuple, set)):
        if len(value) < limit:
            return f"At least {shown} inputs must be selected."
    elif len(str(value or "")) < limit:
        return f"Must not be shorter than {shown} characters."
    return None


def check_max(validator: "InputValidator", field: str, data: Mapping[str, Any], bound: str) -> str | None:
    value = data.get(field)
    limit = float(bound)
    shown = _format_bound(limit)

    if is_numeric(value):
        if float(value) > limit:
            return f"Must not be greater than {shown}."
    elif isinstance(value, (list, tuple, set)):
        if len(value) > limit:
            return f"At most {shown} inputs must be selected."
    elif len(str(value or "")) > limit:
        return f"Must not be longer than {shown} characters."
    return None


def check_matches(validator: "InputValidator", field: str, data: Mapping[str, Any], other: str) -> str | None:
    if data.get(field) != data.get(other):
        return f"Must match {other}."
    return None


RuleHandler = Callable[..., str | None]

RULE_HANDLERS: dict[Rule, RuleHandler] = {
    Rule.REQUIRED: check_required,
    Rule.UNIQUE: check_unique,
    Rule.FORMAT: check_format,
    Rule.MIN: check_min,
    Rule.MAX: check_max,
    Rule.MATCHES: check_matches,
}


class InputValidator:
    """Runs per-field rule lists against a mapping of submitted values."""

    def __init__(self, validations: Mapping[str, str], db: "Database | None" = None) -> None:
        """
        Args:
            validations: Field name to rule string
            db: Database for the ``unique`` rule

        Raises:
            ConfigurationError: If any rule string is invalid
        """
        self.db = db
        self._validations = {field: parse_rules(rules) for field, rules in validations.items()}
        self._errors: dict[str, str] = {}

    @property
    def errors(self) -> dict[str, str]:
        """First failing message per field from the last run."""
        return dict(self._errors)

    def run(self, data: Mapping[str, Any]) -> bool:
        """Validate ``data``; True if every field passed."""
        self._errors = {}
        for field, rules in self._validations.items():
            required = any(spec.rule is Rule.REQUIRED for spec in rules)
            if not required and is_blank(data.get(field)):
                continue

            for spec in rules:
                error = RULE_HANDLERS[spec.rule](self, field, data, *spec.args)
                if error:
                    # Only the first failure per field is reported
                    self._errors[field] = error
                    break

        if self._errors:
            logger.debug(f"Validation failed for fields: {sorted(self._errors)}")
        return not self._errors
