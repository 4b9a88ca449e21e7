"""Verification code issuer."""

import secrets

CODE_LENGTH = 6


def generate_verification_code() -> str:
    """
    Generate a cryptographically secure 6-digit verification code.

    Sampled uniformly from 000000-999999. Returns a string to preserve
    leading zeros.
    """
    return f"{secrets.randbelow(10**CODE_LENGTH):0{CODE_LENGTH}d}"
