"""
Password hashing helpers.

bcrypt with a fixed cost factor; verification is constant-time via
bcrypt.checkpw. bcrypt only reads the first 72 bytes of a password.
"""

import bcrypt

DEFAULT_ROUNDS = 10

# Hash of a throwaway password, compared against when an account is missing
# or has no password so that login timing does not reveal account existence.
DUMMY_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10)).decode()


def _pwd_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    return bcrypt.hashpw(_pwd_bytes(password), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check password against hash, always running bcrypt once."""
    stored = password_hash or DUMMY_HASH
    matched = bcrypt.checkpw(_pwd_bytes(password), stored.encode())
    return matched and password_hash is not None
