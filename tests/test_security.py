"""
Tests for security primitives: hashing, JWT dan recovery code.
"""

from datetime import timedelta

import pytest

from app.core.security import security
from app.core.exceptions import TokenError, ExpiredTokenException
from app.models.account import Account


@pytest.mark.unit
@pytest.mark.security
class TestPasswordHashing:
    """Test password hashing functionality."""

    def test_hash_password(self):
        password = "TestPassword123!"
        hashed = security.hash_password(password)

        assert hashed != password
        assert hashed.startswith("$argon2")

    def test_verify_password(self):
        hashed = security.hash_password("TestPassword123!")

        assert security.verify_password("TestPassword123!", hashed) is True
        assert security.verify_password("WrongPassword", hashed) is False

    def test_account_set_password_hashes(self):
        """Account.set_password never stores the plain text."""
        account = Account(a_username="alice")
        account.set_password("TestPassword123!")

        assert account.a_password_hash != "TestPassword123!"
        assert security.verify_password("TestPassword123!", account.a_password_hash)


@pytest.mark.unit
@pytest.mark.security
class TestJWTTokens:
    """Test JWT token functionality."""

    def test_create_access_token(self):
        token = security.create_access_token(
            subject="account-id",
            additional_claims={"username": "alice", "role": "user"}
        )

        payload = security.decode_token(token)
        assert payload["sub"] == "account-id"
        assert payload["username"] == "alice"
        assert payload["type"] == "access"

    def test_decode_expired_token(self):
        token = security.create_access_token(
            subject="test",
            expires_delta=timedelta(seconds=-1)
        )

        with pytest.raises(ExpiredTokenException) as exc_info:
            security.decode_token(token)

        assert exc_info.value.details == {"expired": True}

    def test_decode_invalid_token(self):
        with pytest.raises(TokenError):
            security.decode_token("invalid-token")

    def test_decode_wrong_token_type(self):
        token = security.create_access_token(subject="test")

        with pytest.raises(TokenError) as exc_info:
            security.decode_token(token, expected_type="refresh")

        assert "Invalid token type" in str(exc_info.value)


@pytest.mark.unit
@pytest.mark.security
class TestRecoveryCodes:
    """Test recovery code generation dan comparison."""

    def test_generate_numeric_token(self):
        code = security.generate_numeric_token(6)

        assert len(code) == 6
        assert code.isdigit()

    def test_generate_numeric_token_custom_length(self):
        assert len(security.generate_numeric_token(8)) == 8

    def test_codes_are_not_constant(self):
        codes = {security.generate_numeric_token(6) for _ in range(20)}

        assert len(codes) > 1

    @pytest.mark.parametrize(
        "provided, stored, expected",
        [
            ("123456", "123456", True),
            ("123457", "123456", False),
            ("012345", "12345", False),
            ("123456 ", "123456", False),
            ("", "123456", False),
        ]
    )
    def test_compare_codes(self, provided, stored, expected):
        assert security.compare_codes(provided, stored) is expected
