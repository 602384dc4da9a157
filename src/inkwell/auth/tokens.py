"""Random token generation for OAuth state nonces, CSRF tokens and session ids."""

from __future__ import annotations

import secrets
import string

TOKEN_BYTES = 32

_HEX_DIGITS = frozenset(string.hexdigits.lower())


def generate_token(byte_length: int = TOKEN_BYTES) -> str:
    """Return `byte_length` CSPRNG bytes as a lowercase hex string."""
    if byte_length < 1:
        raise ValueError("byte_length must be positive")
    return secrets.token_hex(byte_length)


def is_well_formed_token(value: str | None, byte_length: int = TOKEN_BYTES) -> bool:
    """Check that `value` looks like something `generate_token` produced."""
    if not value or len(value) != 2 * byte_length:
        return False
    return all(ch in _HEX_DIGITS for ch in value)
