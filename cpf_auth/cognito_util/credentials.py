"""
Deterministic account credential.

Cognito's admin auth flow needs a password even though customers never type
one. Deriving it from data the gateway already has lets every invocation
reproduce it without storing a secret. The result satisfies the default pool
password policy (upper, lower, digit, symbol, length >= 8).
"""

from __future__ import annotations

from .config import CognitoConfig


def derive_password(cpf: str, email: str, config: CognitoConfig | None = None) -> str:
    """Return the credential for the account of ``cpf``/``email``."""
    if config is not None and config.fixed_password:
        return config.fixed_password

    digits = "".join(ch for ch in cpf if ch.isdigit())
    suffix = digits[-4:].rjust(4, "0")
    return f"Cpf#{suffix}Auth{len(email):02d}!"
