"""
Unit tests for identifier and operator whitelisting.
"""

import pytest

from querykit.infrastructure.security.input_sanitizer import InputSanitizer


@pytest.mark.unit
class TestIdentifierValidation:
    """Test column identifier checks."""

    @pytest.mark.parametrize("name", ["email", "users.email", "first_name", "*", "users.*", "ID"])
    def test_valid_identifiers(self, name):
        assert InputSanitizer.validate_identifier(name) is True

    @pytest.mark.parametrize(
        "name",
        [
            "",
            "email; DROP TABLE users",
            "email--",
            "COUNT(*)",
            "first name",
            "col1",
            "email'",
            'email"',
            None,
            42,
        ],
    )
    def test_invalid_identifiers(self, name):
        assert InputSanitizer.validate_identifier(name) is False

    def test_validate_identifiers_requires_all(self):
        assert InputSanitizer.validate_identifiers("id", "email") is True
        assert InputSanitizer.validate_identifiers("id", "email;") is False


@pytest.mark.unit
class TestTableValidation:
    """Test table name checks."""

    def test_letters_only(self):
        assert InputSanitizer.validate_table_name("users") is True
        assert InputSanitizer.validate_table_name("Users") is True

    @pytest.mark.parametrize("name", ["user_roles", "public.users", "users2", "users;", "", None])
    def test_rejected(self, name):
        assert InputSanitizer.validate_table_name(name) is False


@pytest.mark.unit
class TestOperatorValidation:
    """Test operator whitelist."""

    @pytest.mark.parametrize(
        "operator",
        ["=", "<", ">", "!=", "<>", "<=>", "IS", "IS NOT", "IS NULL", "IS NOT NULL", "LIKE", "NOT LIKE"],
    )
    def test_whitelisted(self, operator):
        assert InputSanitizer.validate_operator(operator) is True

    @pytest.mark.parametrize("operator", ["like", "is  not", " not like ", "Is Null"])
    def test_case_and_spacing_are_normalized(self, operator):
        assert InputSanitizer.validate_operator(operator) is True

    @pytest.mark.parametrize("operator", ["==", "<=", ">=", "IN", "DROP", "= 1 OR 1 =", "", None])
    def test_rejected(self, operator):
        assert InputSanitizer.validate_operator(operator) is False

    def test_normalize(self):
        assert InputSanitizer.normalize_operator("  is \t not  ") == "IS NOT"

    def test_unary(self):
        assert InputSanitizer.is_unary_operator("is null") is True
        assert InputSanitizer.is_unary_operator("IS NOT NULL") is True
        assert InputSanitizer.is_unary_operator("IS") is False
        assert InputSanitizer.is_unary_operator("=") is False
