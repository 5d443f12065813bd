from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from cpf_auth.auth.authorizer import handle_authorization
from cpf_auth.auth.events import AuthorizerRequest, IssuanceRequest
from cpf_auth.auth.issuance import handle_issuance
from cpf_auth.context import AppContext
from cpf_auth.errors import Unauthorized
from cpf_auth.schemas.auth import AuthorizeIn

router = APIRouter(tags=["auth"])


def get_app_context(request: Request) -> AppContext:
    app_context = getattr(request.app.state, "app_context", None)
    if app_context is None:
        raise RuntimeError("App context not created. Did app startup run?")
    return app_context


def _to_response(proxy: dict[str, Any]) -> Response:
    return Response(
        content=proxy["body"],
        status_code=proxy["statusCode"],
        headers=proxy["headers"],
        media_type="application/json",
    )


@router.post("/auth")
async def issue_token(request: Request, app_context: AppContext = Depends(get_app_context)) -> Response:
    raw = await request.body()
    body = raw.decode("utf-8", errors="replace")
    return _to_response(handle_issuance(IssuanceRequest(body=body), app_context))


@router.post("/authorize")
def authorize(payload: AuthorizeIn, app_context: AppContext = Depends(get_app_context)) -> dict[str, Any]:
    request = AuthorizerRequest(
        authorization_token=payload.authorization_token,
        method_arn=payload.method_arn,
    )
    try:
        return handle_authorization(request, app_context.validator)
    except Unauthorized as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
