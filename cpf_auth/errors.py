"""Error types shared by the issuance and authorization flows."""

from __future__ import annotations


class IdentityProviderError(Exception):
    """A Cognito admin call failed. ``code`` is the provider error code."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class UserNotFoundError(IdentityProviderError):
    """The account does not exist in the user pool."""


class AuthenticationChallengeError(IdentityProviderError):
    """Admin auth returned a challenge instead of tokens."""


class Unauthorized(Exception):
    """
    No bearer token was presented.

    API Gateway maps an authorizer failing with the literal message
    ``Unauthorized`` to a 401 response, so the message is fixed.
    """

    def __init__(self) -> None:
        super().__init__("Unauthorized")
