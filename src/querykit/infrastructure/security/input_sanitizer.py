"""
Input Sanitization - Identifier and operator whitelisting for SQL assembly.

Table and column names cannot be sent as bound parameters, so anything that
ends up spliced into a statement passes through here first. This is a
syntactic whitelist, not a complete injection defense: identifiers should
still come from trusted, code-defined strings rather than from user input.
"""

import re


class InputSanitizer:
    """
    Whitelist checks for SQL identifiers and relational operators.

    Column names may contain letters, underscores, ``*`` and ``.`` (for
    ``table.column`` and ``*`` selections). Table names are stricter: letters
    only.
    """

    COLUMN_PATTERN = re.compile(r"[A-Za-z_*.]+")
    TABLE_PATTERN = re.compile(r"[A-Za-z]+")

    VALID_OPERATORS = (
        "=",
        "<",
        ">",
        "!=",
        "<>",
        "<=>",
        "IS",
        "IS NOT",
        "IS NULL",
        "IS NOT NULL",
        "LIKE",
        "NOT LIKE",
    )

    # Operators that take no right-hand operand
    UNARY_OPERATORS = frozenset({"IS NULL", "IS NOT NULL"})

    @classmethod
    def validate_identifier(cls, name: object) -> bool:
        """Return True if ``name`` is an acceptable column identifier."""
        return isinstance(name, str) and cls.COLUMN_PATTERN.fullmatch(name) is not None

    @classmethod
    def validate_identifiers(cls, *names: object) -> bool:
        """Return True only if every name is an acceptable column identifier."""
        return all(cls.validate_identifier(name) for name in names)

    @classmethod
    def validate_table_name(cls, name: object) -> bool:
        """Return True if ``name`` is an acceptable table name."""
        return isinstance(name, str) and cls.TABLE_PATTERN.fullmatch(name) is not None

    @classmethod
    def normalize_operator(cls, operator: str) -> str:
        """Uppercase and collapse whitespace so ``is  not`` matches ``IS NOT``."""
        return " ".join(operator.split()).upper()

    @classmethod
    def validate_operator(cls, operator: object) -> bool:
        """Return True if the uppercased operator is in the whitelist."""
        if not isinstance(operator, str):
            return False
        return cls.normalize_operator(operator) in cls.VALID_OPERATORS

    @classmethod
    def is_unary_operator(cls, operator: str) -> bool:
        """Return True for operators rendered without a bound value."""
        return cls.normalize_operator(operator) in cls.UNARY_OPERATORS
