from __future__ import annotations

import hmac
import re

CPF_LENGTH = 11
CNPJ_LENGTH = 14
FRAGMENT_LENGTH = 3

_NON_DIGITS = re.compile(r"\D")


def digits_only(value: str | None) -> str:
    return _NON_DIGITS.sub("", value or "")


def is_supported_document(document: str | None) -> bool:
    return len(digits_only(document)) in (CPF_LENGTH, CNPJ_LENGTH)


def expected_fragment(document: str | None) -> str | None:
    """Last 3 digits of a CPF, first 3 digits of a CNPJ, None for anything else."""
    digits = digits_only(document)
    if len(digits) == CPF_LENGTH:
        return digits[-FRAGMENT_LENGTH:]
    if len(digits) == CNPJ_LENGTH:
        return digits[:FRAGMENT_LENGTH]
    return None


def fragment_matches(document: str | None, supplied: str | None) -> bool:
    expected = expected_fragment(document)
    if expected is None or supplied is None:
        return False
    return hmac.compare_digest(expected, supplied.strip())
