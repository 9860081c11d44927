"""Password hashing and strength checks."""

import pytest

from intervue.auth.password import (
    PasswordStrengthError,
    hash_password,
    validate_password_strength,
    verify_password,
)


class TestHashing:
    def test_hash_is_argon2id(self):
        assert hash_password("correct horse").startswith("$argon2id$")

    def test_hashes_are_salted(self):
        assert hash_password("same-password") != hash_password("same-password")

    def test_verify_roundtrip(self):
        hashed = hash_password("s3cret!")
        assert verify_password("s3cret!", hashed) is True
        assert verify_password("S3cret!", hashed) is False

    def test_verify_garbage_hash(self):
        assert verify_password("anything", "not-a-real-hash") is False


class TestStrength:
    @pytest.mark.parametrize("password", ["abcdef", "x" * 128, "pass word"])
    def test_acceptable(self, password):
        validate_password_strength(password)

    @pytest.mark.parametrize(
        "password,message",
        [
            ("", "empty"),
            ("      ", "empty"),
            ("abc12", "at least 6"),
            ("x" * 129, "128"),
        ],
    )
    def test_rejected(self, password, message):
        with pytest.raises(PasswordStrengthError, match=message):
            validate_password_strength(password)
