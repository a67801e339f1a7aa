"""
Test cases for password hashing.
"""
import pytest
from auth_service.auth.passwords import hash_password, verify_password


def test_hash_is_not_plaintext():
    hashed = hash_password("secret", rounds=4)
    assert hashed != "secret"
    assert hashed.startswith("$2")


def test_same_password_gets_different_salts():
    assert hash_password("secret", rounds=4) != hash_password("secret", rounds=4)


@pytest.mark.parametrize("password", ["secret", "abc", "p@ss w0rd!", "ünïcödé"])
def test_verify_accepts_matching_password(password):
    assert verify_password(password, hash_password(password, rounds=4)) is True


def test_verify_rejects_wrong_password():
    hashed = hash_password("secret", rounds=4)
    assert verify_password("Secret", hashed) is False
    assert verify_password("", hashed) is False


def test_verify_returns_false_for_malformed_hash():
    assert verify_password("secret", "not-a-bcrypt-hash") is False
    assert verify_password("secret", "") is False
