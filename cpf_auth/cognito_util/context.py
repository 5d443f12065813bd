"""Serializable context produced after validating a Cognito ID token."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenContext:
    """
    Identity attached to an authorized request.

    Populated from validated JWT claims. Absent claims are empty strings so
    the values can be handed to API Gateway, which only accepts scalars.
    """

    subject: str
    """Cognito user id (``sub``)."""

    customer_id: str
    """``custom:customer_id`` mirrored from the customer record."""

    cpf: str
    """``custom:cpf`` written when the account was provisioned."""

    email: str

    def to_policy_context(self) -> dict[str, str]:
        """Return the authorizer ``context`` map consumed by downstream APIs."""
        return {
            "customerId": self.customer_id,
            "cpf": self.cpf,
            "email": self.email,
        }
