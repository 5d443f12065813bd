from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from cpf_auth.models.customer import Customer


def find_customer_by_cpf(db: Session, cpf: str) -> Customer | None:
    """Return the customer registered under ``cpf``, or None."""
    return db.execute(select(Customer).where(Customer.cpf == cpf)).scalar_one_or_none()
