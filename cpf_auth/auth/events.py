from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Mapping, Union


@dataclass(frozen=True)
class AuthorizerRequest:
    """API Gateway TOKEN authorizer invocation."""

    authorization_token: str
    method_arn: str


@dataclass(frozen=True)
class IssuanceRequest:
    """``POST /auth`` proxy invocation. ``body`` is the raw JSON text."""

    body: str


InboundRequest = Union[AuthorizerRequest, IssuanceRequest]


def is_authorizer_event(event: Mapping[str, Any]) -> bool:
    return event.get("type") == "TOKEN" or "authorizationToken" in event


def classify_event(event: Mapping[str, Any]) -> InboundRequest:
    """Resolve the event shape once; handlers never look at the raw event."""
    if is_authorizer_event(event):
        return AuthorizerRequest(
            authorization_token=event.get("authorizationToken") or "",
            method_arn=event.get("methodArn") or "",
        )

    body = event.get("body") or ""
    if body and event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            # Left undecoded; JSON parsing reports it as a bad request.
            pass
    return IssuanceRequest(body=body)
