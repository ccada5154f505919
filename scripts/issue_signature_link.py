#!/usr/bin/env python3
"""
Issue a contract signing link from the command line.

Useful when email delivery is down: the link is printed so it can be sent
to the customer by other means. Any link still pending for the contract is
invalidated, exactly as when the request comes from the back office.

Usage:
  python scripts/issue_signature_link.py --contract-id 42 [--send-email]
"""

import asyncio
import sys
from datetime import timedelta
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.application.errors import AppError
from src.application.use_cases.signatures import issue_signature_token, send_signature_request
from src.config.settings import get_settings
from src.infrastructure.db.session import (
    SQLAlchemyUnitOfWork,
    create_engine,
    create_session_factory,
)
from src.infrastructure.email.factory import create_email_service
from src.infrastructure.email.renderer.engine import EmailTemplateRenderer


async def issue_link(contract_id: int, send_email: bool) -> int:
    settings = get_settings()
    engine = create_engine(settings.database_url)
    session_factory = create_session_factory(engine)

    try:
        uow = SQLAlchemyUnitOfWork(session_factory)
        async with uow:
            if send_email:
                result = await send_signature_request.execute(
                    uow=uow,
                    contract_id=contract_id,
                    settings=settings,
                    email_service=create_email_service(settings),
                    renderer=EmailTemplateRenderer.create_default(),
                )
                email_sent = result.email_sent
            else:
                result = await issue_signature_token.execute(
                    uow=uow,
                    contract_id=contract_id,
                    build_signing_url=settings.signing_url,
                    ttl=timedelta(hours=settings.signature_token_ttl_hours),
                )
                email_sent = False
    except AppError as exc:
        print(f"❌ {exc.message}")
        return 1
    finally:
        await engine.dispose()

    print(f"\n🔑 Signing link for contract #{contract_id}")
    print(f"   {result.signing_url}")
    print(f"   Valid until {result.expires_at.isoformat()}")
    if send_email:
        print("\n📧 Email sent" if email_sent else "\n⚠️  Email was not sent")
    return 0


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Issue a contract signing link")
    parser.add_argument("--contract-id", type=int, required=True, help="Contract to be signed")
    parser.add_argument(
        "--send-email",
        action="store_true",
        help="Also email the link to the customer using the configured provider",
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(issue_link(args.contract_id, args.send_email)))
