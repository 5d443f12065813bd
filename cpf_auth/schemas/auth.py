from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel, to_pascal


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserOut(_CamelModel):
    id: int
    cpf: str
    email: str
    name: str


class IssuanceOut(_CamelModel):
    token: str
    access_token: str
    refresh_token: str | None
    expires_in: int
    user: UserOut


class ErrorOut(BaseModel):
    error: str
    message: str


class PolicyStatement(BaseModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    action: str = "execute-api:Invoke"
    effect: str
    resource: str


class PolicyDocument(BaseModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    version: str = "2012-10-17"
    statement: list[PolicyStatement]


class AuthorizerPolicy(_CamelModel):
    principal_id: str
    policy_document: PolicyDocument | None = None
    context: dict[str, str] | None = None

    def to_response(self) -> dict[str, object]:
        """API Gateway authorizer response; unset parts are left out."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AuthorizeIn(_CamelModel):
    """TOKEN authorizer event, as posted to the HTTP surface."""

    type: str = "TOKEN"
    authorization_token: str = ""
    method_arn: str = ""
