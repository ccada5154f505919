from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.application.interfaces.unit_of_work import UnitOfWork
from src.application.use_cases.signatures import issue_signature_token
from src.config.settings import Settings
from src.infrastructure.email.models import EmailService
from src.infrastructure.email.renderer.engine import EmailTemplateRenderer

logger = logging.getLogger(__name__)

TEMPLATE_KEY = "contract_signature"


@dataclass(slots=True)
class SignatureRequestResult:
    contract_id: int
    signing_url: str
    expires_at: datetime
    email_sent: bool


async def execute(
    *,
    uow: UnitOfWork,
    contract_id: int,
    settings: Settings,
    email_service: EmailService,
    renderer: EmailTemplateRenderer,
) -> SignatureRequestResult:
    issued = await issue_signature_token.execute(
        uow=uow,
        contract_id=contract_id,
        build_signing_url=settings.signing_url,
        ttl=timedelta(hours=settings.signature_token_ttl_hours),
    )
    result = SignatureRequestResult(
        contract_id=contract_id,
        signing_url=issued.signing_url,
        expires_at=issued.expires_at,
        email_sent=False,
    )
    contract = issued.contract
    if not contract.customer_email:
        logger.info("Contract #%s has no customer email; returning link only", contract_id)
        return result

    message = renderer.render(
        template_key=TEMPLATE_KEY,
        settings=settings,
        context={
            "contract_id": contract.contract_id,
            "customer_name": contract.customer_name,
            "vehicle_description": contract.vehicle_description,
            "signing_url": issued.signing_url,
            "expires_at": issued.expires_at.strftime("%d/%m/%Y %H:%M UTC"),
        },
    ).addressed_to(contract.customer_email)
    try:
        await email_service.send(message)
    except Exception:  # noqa: BLE001
        # the token is already committed; the caller still gets the link
        logger.exception("Failed to send signature email for contract #%s", contract_id)
        return result
    result.email_sent = True
    return result
