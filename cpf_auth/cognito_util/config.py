"""Configuration from environment variables. No hardcoded secrets."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _getenv(key: str, default: str | None = None) -> str | None:
    return os.environ.get(key, default)


def _getenv_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class CognitoConfig:
    """
    AWS Cognito user pool configuration from environment.

    Required:
        COGNITO_USER_POOL_ID: User pool id, e.g. ``us-east-1_AbCdEf123``.
        COGNITO_CLIENT_ID: App client id; used as audience of ID tokens.

    Optional:
        AWS_REGION_CUSTOM / AWS_REGION: Pool region (default us-east-1).
        CLOCK_SKEW_SECONDS: Seconds of tolerance for exp/iat (default 0).
        JWKS_CACHE_TTL_SECONDS: How long to cache JWKS (default 3600).
        COGNITO_AUTH_FLOW: Admin auth flow (default ADMIN_NO_SRP_AUTH).
        COGNITO_FIXED_PASSWORD: Use this credential for every account instead
            of deriving one per customer.
        COGNITO_TIMEOUT_SECONDS: Connect/read timeout for Cognito calls (default 10).
    """

    user_pool_id: str
    client_id: str
    region: str
    clock_skew_seconds: int = 0
    jwks_cache_ttl_seconds: int = 3600
    auth_flow: str = "ADMIN_NO_SRP_AUTH"
    fixed_password: str | None = None
    timeout_seconds: int = 10

    @property
    def issuer(self) -> str:
        return f"https://cognito-idp.{self.region}.amazonaws.com/{self.user_pool_id}"

    @property
    def jwks_uri(self) -> str:
        return f"{self.issuer}/.well-known/jwks.json"

    @classmethod
    def from_environ(cls) -> CognitoConfig:
        pool = _strip_or_none(_getenv("COGNITO_USER_POOL_ID"))
        client = _strip_or_none(_getenv("COGNITO_CLIENT_ID"))
        if not pool or not client:
            raise _config_error("COGNITO_USER_POOL_ID and COGNITO_CLIENT_ID must be set")
        region = (
            _strip_or_none(_getenv("AWS_REGION_CUSTOM"))
            or _strip_or_none(_getenv("AWS_REGION"))
            or "us-east-1"
        )
        return cls(
            user_pool_id=pool,
            client_id=client,
            region=region,
            clock_skew_seconds=_getenv_int("CLOCK_SKEW_SECONDS", 0),
            jwks_cache_ttl_seconds=_getenv_int("JWKS_CACHE_TTL_SECONDS", 3600),
            auth_flow=_strip_or_none(_getenv("COGNITO_AUTH_FLOW")) or "ADMIN_NO_SRP_AUTH",
            fixed_password=_strip_or_none(_getenv("COGNITO_FIXED_PASSWORD")),
            timeout_seconds=_getenv_int("COGNITO_TIMEOUT_SECONDS", 10),
        )


def _strip_or_none(s: str | None) -> str | None:
    if s is None:
        return None
    t = s.strip()
    return t if t else None


def _config_error(msg: str) -> Exception:
    return ValueError(msg)
