"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a session that rolls back
after each test, so tests do not affect each other. Identity-provider tests
use a MagicMock in place of the boto3 client; errors are real botocore
ClientErrors so translation is exercised. Token tests sign real RS256 JWTs
with a throwaway RSA key.
"""
from __future__ import annotations

import time
from datetime import datetime
from typing import Any
from unittest.mock import MagicMock, patch

import jwt
import pytest
from botocore.exceptions import ClientError
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cpf_auth.cognito_util import CognitoConfig, IdentityClient
from cpf_auth.db.session import Database
from cpf_auth.settings import Settings


TEST_DB_URL = "sqlite:///:memory:"
TEST_KID = "test-key-1"


@pytest.fixture
def engine():
    """
    Create a fresh in-memory SQLite engine for each test.

    StaticPool keeps one connection, so the FastAPI test client (which runs
    the app in another thread) sees the same database.
    """
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from cpf_auth.db.base import Base
    from cpf_auth.models import customer  # noqa: F401  (register the table)

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def database(tables):
    """Database handle over the in-memory engine, with one registered customer."""
    from cpf_auth.models.customer import Customer

    db = Database(Settings(), engine=tables)
    with db.session() as s:
        s.add(
            Customer(
                id=42,
                first_name="Maria",
                last_name="Silva",
                cpf="12345678901",
                email="maria.silva@example.com",
                created_at=datetime(2024, 1, 10, 12, 0, 0),
                updated_at=datetime(2024, 1, 10, 12, 0, 0),
            )
        )
        s.commit()
    return db


@pytest.fixture
def cognito_config() -> CognitoConfig:
    return CognitoConfig(
        user_pool_id="us-east-1_TestPool",
        client_id="test-client-id",
        region="us-east-1",
    )


@pytest.fixture
def client_error():
    """Factory for botocore ClientErrors as raised by the cognito-idp client."""

    def _make(code: str, message: str = "error", operation: str = "AdminGetUser") -> ClientError:
        return ClientError({"Error": {"Code": code, "Message": message}}, operation)

    return _make


@pytest.fixture
def cognito_client() -> MagicMock:
    """Stand-in for the boto3 cognito-idp client."""
    client = MagicMock()
    client.admin_initiate_auth.return_value = {
        "AuthenticationResult": {
            "IdToken": "id-token",
            "AccessToken": "access-token",
            "RefreshToken": "refresh-token",
            "ExpiresIn": 3600,
            "TokenType": "Bearer",
        }
    }
    return client


@pytest.fixture
def identity(cognito_config, cognito_client) -> IdentityClient:
    return IdentityClient(cognito_config, client=cognito_client)


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jwks(rsa_private_key) -> dict[str, Any]:
    jwk = RSAAlgorithm.to_jwk(rsa_private_key.public_key(), as_dict=True)
    jwk["kid"] = TEST_KID
    jwk["alg"] = "RS256"
    jwk["use"] = "sig"
    return {"keys": [jwk]}


@pytest.fixture
def make_token(rsa_private_key, cognito_config):
    """Build a signed Cognito-style ID token; override claims with a dict; None drops a claim."""

    def _make(overrides: dict[str, Any] | None = None, *, kid: str = TEST_KID, key=None) -> str:
        now = int(time.time())
        claims: dict[str, Any] = {
            "sub": "4f1c2d3e-0000-4000-8000-000000000042",
            "aud": cognito_config.client_id,
            "iss": cognito_config.issuer,
            "token_use": "id",
            "email": "maria.silva@example.com",
            "custom:customer_id": "42",
            "custom:cpf": "12345678901",
            "iat": now,
            "exp": now + 3600,
        }
        claims.update(overrides or {})
        claims = {k: v for k, v in claims.items() if v is not None}
        return jwt.encode(claims, key or rsa_private_key, algorithm="RS256", headers={"kid": kid})

    return _make


@pytest.fixture
def validator(cognito_config, jwks):
    """Validator whose JWKS fetch returns the test key set."""
    from cpf_auth.cognito_util import CognitoTokenValidator
    from cpf_auth.cognito_util.signing_keys import PoolSigningKeys

    with patch.object(PoolSigningKeys, "_download", return_value=jwks):
        yield CognitoTokenValidator(cognito_config)
