"""Tests for ID token validation and claim extraction."""

import time
from unittest.mock import patch

import jwt
import pytest
import requests
from cryptography.hazmat.primitives.asymmetric import rsa

from cpf_auth.cognito_util.validator import CognitoTokenValidator, ValidationError, _extract_claims


def test_extract_claims():
    payload = {
        "sub": "sub-123",
        "custom:customer_id": "42",
        "custom:cpf": "12345678901",
        "email": "maria@example.com",
        "token_use": "id",
    }
    ctx = _extract_claims(payload)
    assert ctx.subject == "sub-123"
    assert ctx.customer_id == "42"
    assert ctx.cpf == "12345678901"
    assert ctx.email == "maria@example.com"


def test_extract_claims_missing_custom_attributes_are_empty():
    ctx = _extract_claims({"sub": "sub-456"})
    assert ctx.customer_id == ""
    assert ctx.cpf == ""
    assert ctx.email == ""


def test_extract_claims_numeric_values_become_strings():
    ctx = _extract_claims({"sub": "s", "custom:customer_id": 42})
    assert ctx.customer_id == "42"


def test_valid_token_roundtrip(validator, make_token):
    ctx = validator.validate_and_extract(make_token())
    assert ctx.subject == "4f1c2d3e-0000-4000-8000-000000000042"
    assert ctx.customer_id == "42"
    assert ctx.cpf == "12345678901"
    assert ctx.email == "maria.silva@example.com"


def test_not_a_jwt_raises(validator):
    with pytest.raises(ValidationError, match="missing key id"):
        validator.validate_and_extract("not-a-jwt")


def test_missing_kid_raises(cognito_config):
    token = jwt.encode({"sub": "u", "exp": time.time() + 300}, "x" * 32, algorithm="HS256", headers={})
    validator = CognitoTokenValidator(config=cognito_config)
    with pytest.raises(ValidationError):
        validator.validate_and_extract(token)


def test_unknown_kid_raises(validator, make_token):
    with pytest.raises(ValidationError, match="unknown signing key"):
        validator.validate_and_extract(make_token(kid="other-key"))


def test_expired_token_raises(validator, make_token):
    now = int(time.time())
    token = make_token({"iat": now - 7200, "exp": now - 3600})
    with pytest.raises(ValidationError, match="expired"):
        validator.validate_and_extract(token)


def test_wrong_audience_raises(validator, make_token):
    with pytest.raises(ValidationError, match="audience"):
        validator.validate_and_extract(make_token({"aud": "another-client"}))


def test_wrong_issuer_raises(validator, make_token):
    token = make_token({"iss": "https://cognito-idp.us-east-1.amazonaws.com/us-east-1_Other"})
    with pytest.raises(ValidationError, match="issuer"):
        validator.validate_and_extract(token)


def test_access_token_is_rejected(validator, make_token):
    with pytest.raises(ValidationError, match="token_use"):
        validator.validate_and_extract(make_token({"token_use": "access"}))


def test_missing_exp_is_rejected(validator, make_token):
    with pytest.raises(ValidationError):
        validator.validate_and_extract(make_token({"exp": None}))


def test_tampered_token_raises(validator, make_token):
    header, payload, signature = make_token().split(".")
    forged = make_token({"custom:customer_id": "999"}).split(".")[1]
    with pytest.raises(ValidationError):
        validator.validate_and_extract(f"{header}.{forged}.{signature}")


def test_token_signed_by_other_key_raises(validator, make_token):
    other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    with pytest.raises(ValidationError):
        validator.validate_and_extract(make_token(key=other))


def test_jwks_unavailable_raises_validation_error(cognito_config, make_token):
    with patch("cpf_auth.cognito_util.signing_keys.requests.get") as mock_get:
        mock_get.side_effect = requests.ConnectionError("down")
        validator = CognitoTokenValidator(config=cognito_config)
        with pytest.raises(ValidationError, match="signing keys unavailable"):
            validator.validate_and_extract(make_token())


def test_malformed_key_set_raises_validation_error(cognito_config, make_token):
    with patch("cpf_auth.cognito_util.signing_keys.requests.get") as mock_get:
        mock_get.return_value.json.return_value = ["not", "a", "key", "set"]
        validator = CognitoTokenValidator(config=cognito_config)
        with pytest.raises(ValidationError, match="signing keys unavailable"):
            validator.validate_and_extract(make_token())
