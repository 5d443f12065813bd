"""
API Gateway TOKEN authorizer.

Per request: ``Received -> TokenExtracted -> Allow | Deny | Unauthorized``.

* No token after stripping ``Bearer ``: raise ``Unauthorized`` (401 at the
  gateway, not a policy decision).
* Token fails validation for any reason: Deny for principal ``user``.
* Token valid: Allow for its ``sub`` with customer context attached.
"""

from __future__ import annotations

import logging
from typing import Any

from cpf_auth.cognito_util import CognitoTokenValidator, ValidationError
from cpf_auth.errors import Unauthorized
from cpf_auth.schemas.auth import AuthorizerPolicy, PolicyDocument, PolicyStatement

from .events import AuthorizerRequest

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
ALLOW = "Allow"
DENY = "Deny"
DENY_PRINCIPAL = "user"


def extract_token(authorization: str | None) -> str:
    """Strip an optional ``Bearer `` prefix; raise Unauthorized if nothing is left."""
    token = authorization or ""
    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX) :]
    token = token.strip()
    if not token:
        raise Unauthorized()
    return token


def generate_policy(
    principal_id: str,
    effect: str | None,
    resource: str | None,
    context: dict[str, str] | None = None,
) -> dict[str, Any]:
    """
    Build the authorizer response.

    The policy document is left out when effect or resource is missing, and
    the context when it is empty.
    """
    policy = AuthorizerPolicy(principal_id=principal_id)
    if effect and resource:
        policy.policy_document = PolicyDocument(
            statement=[PolicyStatement(effect=effect, resource=resource)],
        )
    if context:
        policy.context = dict(context)
    return policy.to_response()


def handle_authorization(request: AuthorizerRequest, validator: CognitoTokenValidator) -> dict[str, Any]:
    token = extract_token(request.authorization_token)

    try:
        ctx = validator.validate_and_extract(token)
    except ValidationError as e:
        logger.info("Authorization denied: %s", e)
        return generate_policy(DENY_PRINCIPAL, DENY, request.method_arn)

    logger.debug("Authorization allowed sub=%s", ctx.subject)
    return generate_policy(ctx.subject, ALLOW, request.method_arn, ctx.to_policy_context())
