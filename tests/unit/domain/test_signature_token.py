from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.domain.models.signature_token import SignatureToken, hash_token
from src.domain.value_objects.signature_status import SignatureStatus


def test_issued_token_stores_only_the_hash():
    now = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)
    token = SignatureToken.issue(contract_id=42, ttl=timedelta(hours=48), now=now)

    assert token.token_value is not None
    assert len(token.token_value) == 64
    assert token.token_hash == hash_token(token.token_value)
    assert token.token_value not in repr(token)
    assert token.expires_at == now + timedelta(hours=48)
    assert token.status is SignatureStatus.PENDING
    assert not token.consumed


def test_token_values_are_unique():
    values = {
        SignatureToken.issue(contract_id=1, ttl=timedelta(hours=1)).token_value
        for _ in range(200)
    }
    assert len(values) == 200


def test_expiry_is_evaluated_against_the_given_instant():
    now = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)
    token = SignatureToken.issue(contract_id=1, ttl=timedelta(hours=48), now=now)

    assert not token.is_expired(now + timedelta(hours=48))
    assert token.is_expired(now + timedelta(hours=48, seconds=1))


def test_naive_expiry_from_the_database_is_treated_as_utc():
    now = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)
    token = SignatureToken.issue(contract_id=1, ttl=timedelta(hours=1), now=now)
    token.expires_at = token.expires_at.replace(tzinfo=None)

    assert token.is_expired(now + timedelta(hours=2))
    assert not token.is_expired(now)
