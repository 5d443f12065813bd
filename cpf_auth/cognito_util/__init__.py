"""
Utilities for the Cognito user pool behind the gateway.

Admin account operations live in ``IdentityClient``; ID token validation in
``CognitoTokenValidator``.
"""

from .config import CognitoConfig
from .context import TokenContext
from .credentials import derive_password
from .identity_client import IdentityClient, SessionTokens
from .validator import CognitoTokenValidator, ValidationError

__all__ = [
    "CognitoConfig",
    "TokenContext",
    "derive_password",
    "IdentityClient",
    "SessionTokens",
    "CognitoTokenValidator",
    "ValidationError",
]
