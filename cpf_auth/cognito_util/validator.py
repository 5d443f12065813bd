"""
Validate Cognito-signed JWT (ID token) and extract claims.

Before any claim is trusted the token must pass, in order:

1. **Key lookup**: the ``kid`` header names a key in the pool's JWKS.
2. **Signature**: RS256 with that key.
3. **Issuer** (``iss``): the user pool URL.
4. **Audience** (``aud``): the app client id.
5. **Lifetime**: ``exp`` and ``iat`` within the configured clock skew.
6. **Token use** (``token_use``): ``id``. Access tokens carry no ``aud``
   and no customer attributes, so they are rejected here.
"""

from __future__ import annotations

import logging
from typing import Any

import jwt
import requests

from .config import CognitoConfig
from .context import TokenContext
from .signing_keys import PoolSigningKeys

logger = logging.getLogger(__name__)

EXPECTED_TOKEN_USE = "id"


class ValidationError(Exception):
    """Raised when token validation fails. Do not log the token."""

    pass


def _get_kid(token: str) -> str | None:
    """Read ``kid`` from the JWT header without validating the token."""
    try:
        header = jwt.get_unverified_header(token)
        return header.get("kid") if isinstance(header, dict) else None
    except jwt.InvalidTokenError:
        return None


def _claim(payload: dict[str, Any], name: str) -> str:
    value = payload.get(name)
    if value is None:
        return ""
    return str(value)


def _extract_claims(payload: dict[str, Any]) -> TokenContext:
    """
    Build a ``TokenContext`` from a validated ID token payload.

    * **sub**: Cognito user id, stable for the lifetime of the account.
    * **custom:customer_id** / **custom:cpf**: pool custom attributes written
      during provisioning. Cognito only includes them when the app client has
      read access to them.
    * **email**: the account username for this pool.
    """
    return TokenContext(
        subject=_claim(payload, "sub"),
        customer_id=_claim(payload, "custom:customer_id"),
        cpf=_claim(payload, "custom:cpf"),
        email=_claim(payload, "email"),
    )


class CognitoTokenValidator:
    """
    Validates Cognito ID tokens and extracts claims.

    Holds the pool signing keys per instance; reuse the instance across
    requests.
    """

    def __init__(self, config: CognitoConfig | None = None) -> None:
        self._config = config or CognitoConfig.from_environ()
        self._keys = PoolSigningKeys(
            self._config.jwks_uri,
            self._config.jwks_cache_ttl_seconds,
            self._config.timeout_seconds,
        )

    def validate_and_extract(self, token: str) -> TokenContext:
        """
        Validate the ID token and return a TokenContext.

        Raises ValidationError if key lookup, signature, issuer, audience,
        lifetime or token-use checks fail.
        """
        kid = _get_kid(token)
        if not kid:
            logger.debug("Token missing or invalid kid")
            raise ValidationError("Invalid token: missing key id")

        try:
            signing_key = self._keys.lookup(kid)
        except (requests.RequestException, ValueError) as e:
            logger.warning("JWKS fetch failed: %s", type(e).__name__)
            raise ValidationError("Invalid token: signing keys unavailable") from e
        if signing_key is None:
            logger.debug("No signing key found for kid")
            raise ValidationError("Invalid token: unknown signing key")

        try:
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self._config.client_id,
                issuer=self._config.issuer,
                leeway=self._config.clock_skew_seconds,
                options={
                    "require": ["exp", "iat", "sub"],
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_iat": True,
                    "verify_iss": True,
                    "verify_aud": True,
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Token expired")
            raise ValidationError("Token expired") from e
        except jwt.InvalidIssuerError as e:
            logger.info("Token invalid issuer")
            raise ValidationError("Invalid token: issuer") from e
        except jwt.InvalidAudienceError as e:
            logger.info("Token invalid audience")
            raise ValidationError("Invalid token: audience") from e
        except jwt.InvalidTokenError as e:
            logger.info("Token invalid: %s", type(e).__name__)
            raise ValidationError("Invalid token") from e

        if payload.get("token_use") != EXPECTED_TOKEN_USE:
            logger.info("Token invalid token_use=%s", payload.get("token_use"))
            raise ValidationError("Invalid token: token_use")

        return _extract_claims(payload)
