"""
Tests for password hashing and JWT claims.
"""
from __future__ import annotations

from fantasy_backend.auth import (
    create_access_token,
    create_service_token,
    decode_token,
    hash_password,
    verify_password,
)


def test_hash_and_verify():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_verify_empty_hash_fails():
    assert verify_password("anything", "") is False


def test_token_round_trip_carries_role():
    claims = decode_token(create_access_token("user-1", role="admin"))
    assert claims == {"sub": "user-1", "role": "admin"}


def test_service_token():
    claims = decode_token(create_service_token())
    assert claims["role"] == "service"


def test_invalid_token():
    assert decode_token("not-a-jwt") is None
