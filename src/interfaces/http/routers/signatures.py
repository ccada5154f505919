from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from src.application.use_cases.signatures import (
    get_link_info,
    get_signature_status,
    send_signature_request,
    validate_and_consume,
)
from src.config.settings import Settings
from src.infrastructure.auth.context import AuthContext
from src.infrastructure.email.models import EmailService
from src.infrastructure.email.renderer.engine import EmailTemplateRenderer
from src.interfaces.http.deps import (
    get_app_settings,
    get_auth_context,
    get_email_renderer,
    get_email_service,
    get_uow,
)
from src.interfaces.http.schemas.signatures import (
    SignatureLinkInfoResponse,
    SignatureRequestResponse,
    SignatureStatusResponse,
    SignRequest,
    SignResponse,
)

admin_router = APIRouter(prefix="/api/contracts", tags=["signatures"])
public_router = APIRouter(prefix="/api/public/signature", tags=["signatures"])


@admin_router.post("/{contract_id}/signature-requests", response_model=SignatureRequestResponse)
async def request_signature(
    contract_id: int,
    _: AuthContext = Depends(get_auth_context),
    uow=Depends(get_uow),
    settings: Settings = Depends(get_app_settings),
    email_service: EmailService = Depends(get_email_service),
    renderer: EmailTemplateRenderer = Depends(get_email_renderer),
) -> SignatureRequestResponse:
    result = await send_signature_request.execute(
        uow=uow,
        contract_id=contract_id,
        settings=settings,
        email_service=email_service,
        renderer=renderer,
    )
    message = (
        "Signature email sent"
        if result.email_sent
        else "Signing link generated; email was not sent"
    )
    return SignatureRequestResponse(
        message=message,
        email_sent=result.email_sent,
        signing_url=result.signing_url,
        expires_at=result.expires_at,
    )


@admin_router.get("/{contract_id}/signature", response_model=SignatureStatusResponse)
async def signature_status(
    contract_id: int,
    _: AuthContext = Depends(get_auth_context),
    uow=Depends(get_uow),
) -> SignatureStatusResponse:
    token = await get_signature_status.execute(uow=uow, contract_id=contract_id)
    if token is None:
        return SignatureStatusResponse(has_signature=False)
    return SignatureStatusResponse(
        has_signature=True,
        status=token.status,
        issued_at=token.issued_at,
        expires_at=token.expires_at,
        signed_at=token.signed_at,
    )


@public_router.get("/{token}", response_model=SignatureLinkInfoResponse)
async def link_info(
    token: str,
    uow=Depends(get_uow),
    settings: Settings = Depends(get_app_settings),
) -> SignatureLinkInfoResponse:
    info = await get_link_info.execute(
        uow=uow, token_value=token, max_attempts=settings.signature_max_attempts
    )
    return SignatureLinkInfoResponse(
        contract_id=info.contract_id,
        status=info.status,
        is_signed=info.is_signed,
        customer_name=info.customer_name,
        vehicle_info=info.vehicle_description,
        cpf_cnpj_length=info.document_length,
        expires_at=info.expires_at,
        remaining_attempts=info.remaining_attempts,
    )


@public_router.post("/{token}/sign", response_model=SignResponse)
async def sign(
    token: str,
    payload: SignRequest,
    request: Request,
    uow=Depends(get_uow),
    settings: Settings = Depends(get_app_settings),
) -> SignResponse:
    contract_id = await validate_and_consume.execute(
        uow=uow,
        token_value=token,
        identity_fragment=payload.code,
        signer_ip=request.client.host if request.client else None,
        max_attempts=settings.signature_max_attempts,
    )
    return SignResponse(message="Contract signed", signed=True, contract_id=contract_id)
