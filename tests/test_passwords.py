"""Tests for password strength rules and hashing"""
import pytest

from app.utils.passwords import hash_password, validate_password, verify_password


@pytest.mark.parametrize(
    "password,reason",
    [
        ("short1!", "Password must be at least 12 characters long"),
        ("alllowercase123!", "Password must contain at least one uppercase letter"),
        ("ALLUPPERCASE123!", "Password must contain at least one lowercase letter"),
        ("NoDigitsHere!!", "Password must contain at least one number"),
        ("NoSpecials12345", "Password must contain at least one special character"),
    ],
)
def test_weak_passwords_report_first_failing_rule(password, reason):
    check = validate_password(password)
    assert check.valid is False
    assert check.reason == reason


def test_strong_password_is_accepted():
    check = validate_password("ValidPassw0rd!")
    assert check.valid is True
    assert check.reason is None


def test_hash_and_verify():
    hashed = hash_password("ValidPassw0rd!")
    assert hashed.startswith("$2")
    assert verify_password("ValidPassw0rd!", hashed)
    assert not verify_password("ValidPassw0rd?", hashed)


def test_malformed_hash_never_matches():
    assert verify_password("ValidPassw0rd!", "not-a-bcrypt-hash") is False
