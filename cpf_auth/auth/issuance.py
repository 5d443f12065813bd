"""
Token issuance for ``POST /auth``.

Flow for a CPF:

1. Look the customer up in the store (404 when absent; Cognito untouched).
2. Reconcile the Cognito account keyed by the customer email:
   - missing: create it with every attribute, including the immutable
     ``custom:cpf``, then set the derived password as permanent;
   - present: update only the mirrored attributes that drifted, then reset
     the derived password so the next step cannot fail on a stale one.
3. Run the admin auth flow with the derived password and return the tokens.

Only "account not found" is recovered from; every other provider or store
error aborts the request with a 500.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from cpf_auth.cognito_util import IdentityClient, SessionTokens, derive_password
from cpf_auth.context import AppContext
from cpf_auth.db.customers import find_customer_by_cpf
from cpf_auth.errors import UserNotFoundError
from cpf_auth.logging_config import mask_cpf
from cpf_auth.models.customer import Customer
from cpf_auth.schemas.auth import IssuanceOut, UserOut

from .events import IssuanceRequest
from .responses import bad_request, error_response, internal_error, json_response

logger = logging.getLogger(__name__)

ATTR_EMAIL = "email"
ATTR_EMAIL_VERIFIED = "email_verified"
ATTR_CUSTOMER_ID = "custom:customer_id"
ATTR_CPF = "custom:cpf"

# Attributes kept in sync with the customer record on every login.
MIRRORED_ATTRIBUTES = (ATTR_EMAIL, ATTR_CUSTOMER_ID)

NOT_REGISTERED_MESSAGE = "Cliente não encontrado. Por favor, cadastre-se primeiro."

_CPF_PUNCTUATION = str.maketrans("", "", ".- ")


class BadRequest(Exception):
    pass


def normalize_cpf(raw: str) -> str:
    """Accept the formatted form ``123.456.789-00`` as well as bare digits."""
    return raw.strip().translate(_CPF_PUNCTUATION)


def parse_cpf(body: str) -> str:
    """Extract the CPF from a JSON request body; raises BadRequest."""
    try:
        data = json.loads(body or "{}")
    except ValueError as e:
        raise BadRequest("Invalid JSON in request body") from e

    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")

    raw = data.get("cpf")
    if isinstance(raw, int) and not isinstance(raw, bool):
        raw = str(raw)
    if not isinstance(raw, str) or not normalize_cpf(raw):
        raise BadRequest("CPF is required")
    return normalize_cpf(raw)


def mirrored_attributes(customer: Customer) -> dict[str, str]:
    return {
        ATTR_EMAIL: customer.email,
        ATTR_CUSTOMER_ID: str(customer.id),
    }


def attribute_diff(current: Mapping[str, str], desired: Mapping[str, str]) -> dict[str, str]:
    """Desired mirrored attributes whose value differs from ``current``."""
    return {
        name: value
        for name, value in desired.items()
        if name in MIRRORED_ATTRIBUTES and current.get(name) != value
    }


def reconcile_identity(customer: Customer, identity: IdentityClient) -> str:
    """
    Ensure a Cognito account matching ``customer`` exists with a known password.

    Returns ``"created"``, ``"updated"`` or ``"unchanged"``.
    """
    username = customer.email
    password = derive_password(customer.cpf, customer.email, identity.config)

    try:
        current = identity.get_user(username)
    except UserNotFoundError:
        attributes = {
            ATTR_EMAIL: customer.email,
            ATTR_EMAIL_VERIFIED: "true",
            ATTR_CUSTOMER_ID: str(customer.id),
            ATTR_CPF: customer.cpf,
        }
        identity.create_user(username, attributes, temporary_password=password)
        identity.set_user_password(username, password, permanent=True)
        logger.info("Cognito user created customer_id=%s", customer.id)
        return "created"

    changes = attribute_diff(current, mirrored_attributes(customer))
    if changes:
        identity.update_user_attributes(username, changes)
        logger.info("Cognito user updated customer_id=%s attributes=%s", customer.id, sorted(changes))
        outcome = "updated"
    else:
        logger.info("Cognito user already up to date customer_id=%s", customer.id)
        outcome = "unchanged"

    identity.set_user_password(username, password, permanent=True)
    return outcome


def issue_session(customer: Customer, identity: IdentityClient) -> SessionTokens:
    password = derive_password(customer.cpf, customer.email, identity.config)
    return identity.initiate_auth(customer.email, password)


def _success_body(customer: Customer, tokens: SessionTokens) -> IssuanceOut:
    return IssuanceOut(
        token=tokens.id_token,
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
        user=UserOut(
            id=customer.id,
            cpf=customer.cpf,
            email=customer.email,
            name=customer.full_name,
        ),
    )


def handle_issuance(request: IssuanceRequest, app_context: AppContext) -> dict[str, Any]:
    """
    Run the issuance flow and shape the proxy response.

    Never raises: unexpected errors are logged and returned as 500.
    """
    try:
        cpf = parse_cpf(request.body)
    except BadRequest as e:
        logger.info("Rejected issuance request: %s", e)
        return bad_request(str(e))

    try:
        with app_context.database.session() as db:
            customer = find_customer_by_cpf(db, cpf)

        if customer is None:
            logger.info("No customer for cpf=%s", mask_cpf(cpf))
            return error_response(404, "Customer not found", NOT_REGISTERED_MESSAGE)

        reconcile_identity(customer, app_context.identity)
        tokens = issue_session(customer, app_context.identity)
    except Exception as e:
        logger.exception("Token issuance failed cpf=%s", mask_cpf(cpf))
        return internal_error(e)

    logger.info("Token issued customer_id=%s", customer.id)
    return json_response(200, _success_body(customer, tokens))
