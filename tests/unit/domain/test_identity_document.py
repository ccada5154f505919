from __future__ import annotations

import pytest

from src.domain.value_objects.identity_document import (
    expected_fragment,
    fragment_matches,
    is_supported_document,
)


@pytest.mark.parametrize(
    ("document", "fragment"),
    [
        ("123.456.789-09", "909"),
        ("12345678909", "909"),
        ("12.345.678/0001-95", "123"),
        ("98765432000110", "987"),
    ],
)
def test_expected_fragment_uses_last_digits_for_cpf_first_for_cnpj(document, fragment):
    assert expected_fragment(document) == fragment
    assert fragment_matches(document, fragment)


@pytest.mark.parametrize("document", [None, "", "1234", "123456789012"])
def test_unsupported_documents_never_match(document):
    assert not is_supported_document(document)
    assert expected_fragment(document) is None
    assert not fragment_matches(document, "123")


def test_fragment_is_compared_exactly_after_trimming():
    assert fragment_matches("123.456.789-09", " 909 ")
    assert not fragment_matches("123.456.789-09", "090")
    assert not fragment_matches("123.456.789-09", "9")
    assert not fragment_matches("123.456.789-09", None)
