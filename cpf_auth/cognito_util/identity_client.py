"""
Thin wrapper around the Cognito ``cognito-idp`` admin API.

Every account is addressed by username, which for this pool is the customer
email. Provider errors are translated into ``cpf_auth.errors`` types so the
issuance flow can branch on "account missing" without knowing botocore.
Calls are single attempts: botocore's retry handler is disabled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from cpf_auth.errors import AuthenticationChallengeError, IdentityProviderError, UserNotFoundError

from .config import CognitoConfig

logger = logging.getLogger(__name__)

USER_NOT_FOUND_CODE = "UserNotFoundException"


@dataclass(frozen=True)
class SessionTokens:
    """Tokens issued by ``AdminInitiateAuth``, passed through unmodified."""

    id_token: str
    access_token: str
    refresh_token: str | None
    expires_in: int


def _to_attribute_list(attributes: Mapping[str, str]) -> list[dict[str, str]]:
    return [{"Name": name, "Value": value} for name, value in attributes.items()]


def _from_attribute_list(raw: list[dict[str, Any]] | None) -> dict[str, str]:
    return {entry["Name"]: entry.get("Value", "") for entry in raw or []}


def build_cognito_client(config: CognitoConfig) -> Any:
    """Create a boto3 client with bounded timeouts and no retries."""
    return boto3.client(
        "cognito-idp",
        region_name=config.region,
        config=Config(
            connect_timeout=config.timeout_seconds,
            read_timeout=config.timeout_seconds,
            retries={"total_max_attempts": 1, "mode": "standard"},
        ),
    )


class IdentityClient:
    """Admin operations against one user pool."""

    def __init__(self, config: CognitoConfig, client: Any | None = None) -> None:
        self._config = config
        self._client = client if client is not None else build_cognito_client(config)

    @property
    def config(self) -> CognitoConfig:
        return self._config

    def _call(self, operation: str, fn: Callable[..., dict[str, Any]], **kwargs: Any) -> dict[str, Any]:
        try:
            return fn(UserPoolId=self._config.user_pool_id, **kwargs)
        except ClientError as e:
            error = e.response.get("Error", {})
            code = error.get("Code")
            message = error.get("Message") or str(e)
            if code == USER_NOT_FOUND_CODE:
                raise UserNotFoundError(message, code=code) from e
            logger.error("Cognito %s failed code=%s", operation, code)
            raise IdentityProviderError(message, code=code) from e
        except BotoCoreError as e:
            logger.error("Cognito %s failed: %s", operation, type(e).__name__)
            raise IdentityProviderError(str(e)) from e

    def get_user(self, username: str) -> dict[str, str]:
        """
        Return the account's attributes as a ``{name: value}`` mapping.

        Raises UserNotFoundError when the account does not exist.
        """
        resp = self._call("AdminGetUser", self._client.admin_get_user, Username=username)
        return _from_attribute_list(resp.get("UserAttributes"))

    def create_user(self, username: str, attributes: Mapping[str, str], temporary_password: str) -> None:
        """Create the account without sending the welcome message."""
        self._call(
            "AdminCreateUser",
            self._client.admin_create_user,
            Username=username,
            UserAttributes=_to_attribute_list(attributes),
            TemporaryPassword=temporary_password,
            MessageAction="SUPPRESS",
        )

    def update_user_attributes(self, username: str, attributes: Mapping[str, str]) -> None:
        self._call(
            "AdminUpdateUserAttributes",
            self._client.admin_update_user_attributes,
            Username=username,
            UserAttributes=_to_attribute_list(attributes),
        )

    def set_user_password(self, username: str, password: str, permanent: bool = True) -> None:
        self._call(
            "AdminSetUserPassword",
            self._client.admin_set_user_password,
            Username=username,
            Password=password,
            Permanent=permanent,
        )

    def initiate_auth(self, username: str, password: str) -> SessionTokens:
        """
        Exchange username/password for tokens via the configured admin flow.

        Raises AuthenticationChallengeError if Cognito answers with a
        challenge (e.g. NEW_PASSWORD_REQUIRED) instead of tokens.
        """
        resp = self._call(
            "AdminInitiateAuth",
            self._client.admin_initiate_auth,
            ClientId=self._config.client_id,
            AuthFlow=self._config.auth_flow,
            AuthParameters={"USERNAME": username, "PASSWORD": password},
        )
        result = resp.get("AuthenticationResult")
        if not result:
            challenge = resp.get("ChallengeName") or "unknown"
            raise AuthenticationChallengeError(f"Authentication returned challenge {challenge}", code=challenge)

        return SessionTokens(
            id_token=result["IdToken"],
            access_token=result["AccessToken"],
            refresh_token=result.get("RefreshToken"),
            expires_in=int(result.get("ExpiresIn", 0)),
        )
