"""Tests for the password policy and the password hasher."""

import pytest

from profusion.core.errors import WeakPassword
from profusion.core.security import PasswordHasher, check_password_policy


class TestPasswordPolicy:
    @pytest.mark.parametrize("password", ["Abc123!@", "a1!bcd", "correct-horse-9"])
    def test_accepts_strong_passwords(self, password):
        check_password_policy(password)

    @pytest.mark.parametrize(
        "password, reason",
        [
            ("a1!", "at least 6 characters"),
            ("123456!", "letter"),
            ("abcdef!", "digit"),
            ("abc123", "symbol"),
        ],
    )
    def test_rejects_weak_passwords(self, password, reason):
        with pytest.raises(WeakPassword) as exc_info:
            check_password_policy(password)
        assert reason in exc_info.value.message

    def test_weak_password_is_a_400(self):
        assert WeakPassword().status_code == 400


class TestPasswordHasher:
    def test_hash_is_not_the_password(self, hasher):
        hashed = hasher.hash("Abc123!@")
        assert hashed != "Abc123!@"
        assert hashed.startswith("$2")

    def test_same_password_gets_different_salts(self, hasher):
        assert hasher.hash("Abc123!@") != hasher.hash("Abc123!@")

    def test_verify(self, hasher):
        hashed = hasher.hash("Abc123!@")
        assert hasher.verify("Abc123!@", hashed)
        assert not hasher.verify("Abc123!#", hashed)

    def test_verify_against_garbage_hash_is_false(self, hasher):
        assert not hasher.verify("Abc123!@", "not-a-bcrypt-hash")

    def test_rounds_are_configurable(self):
        hashed = PasswordHasher(rounds=5).hash("Abc123!@")
        assert hashed.split("$")[2] == "05"
