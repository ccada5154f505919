from __future__ import annotations

import re

import pytest

from src.infrastructure.storage.local import (
    DEFAULT_CONTENT_TYPE,
    LocalFileStore,
    content_type_for,
    safe_extension,
)

GENERATED_NAME = re.compile(r"^\d{13}-[0-9a-f]{16}(\.[A-Za-z0-9]+)?$")


@pytest.fixture()
def store(tmp_path) -> LocalFileStore:
    return LocalFileStore(tmp_path / "uploads")


async def test_save_then_read_round_trips_bytes(store):
    stored = await store.save(b"\x89PNG fake", "carro.png", "image/png")

    assert GENERATED_NAME.match(stored.file_name)
    assert stored.file_name.endswith(".png")
    assert stored.size_bytes == 9
    found = await store.read(stored.file_name)
    assert found is not None
    assert found.data == b"\x89PNG fake"
    assert found.content_type == "image/png"


async def test_zero_byte_file_round_trips(store):
    stored = await store.save(b"", "vazio.pdf", "application/pdf")

    found = await store.read(stored.file_name)
    assert found is not None
    assert found.data == b""
    assert found.content_type == "application/pdf"


async def test_unknown_extension_falls_back_to_binary(store):
    stored = await store.save(b"data", "notes.xyz", "text/plain")

    found = await store.read(stored.file_name)
    assert found.content_type == DEFAULT_CONTENT_TYPE


async def test_read_missing_file_returns_none(store):
    assert await store.read("1700000000000-0123456789abcdef.png") is None


@pytest.mark.parametrize("name", ["../secret.txt", "..", "a/b.png", "", ".hidden"])
async def test_read_rejects_names_outside_the_store(store, name):
    assert await store.read(name) is None


async def test_locate_points_at_the_stored_file(store):
    stored = await store.save(b"abc", "doc.pdf", "application/pdf")

    found = await store.locate(stored.file_name)

    assert found is not None
    assert found.path == store.root / stored.file_name
    assert found.path.read_bytes() == b"abc"
    assert found.content_type == "application/pdf"


@pytest.mark.parametrize("name", ["../secret.txt", "1700000000000-0123456789abcdef.png"])
async def test_locate_missing_or_unsafe_name_returns_none(store, name):
    assert await store.locate(name) is None


async def test_delete(store):
    stored = await store.save(b"abc", "doc.pdf", "application/pdf")

    assert await store.delete(stored.file_name) is True
    assert await store.read(stored.file_name) is None
    assert await store.delete(stored.file_name) is False


@pytest.mark.parametrize(
    ("original", "extension"),
    [
        ("photo.JPG", ".JPG"),
        ("../../etc/passwd", ""),
        ("..\\..\\windows\\evil.exe", ".exe"),
        ("x.png\\..\\evil", ""),
        ("noext", ""),
        ("weird.p$g", ""),
    ],
)
def test_only_a_safe_extension_survives(original, extension):
    assert safe_extension(original) == extension


def test_generated_names_keep_traversal_out(store):
    name = store.generate_file_name("../../etc/passwd.png")
    assert "/" not in name
    assert ".." not in name
    assert name.endswith(".png")


def test_content_type_lookup_is_case_insensitive():
    assert content_type_for("A.JPEG") == "image/jpeg"
    assert content_type_for("a.webp") == "image/webp"


async def test_sequential_saves_with_same_name_do_not_collide(store):
    names = set()
    for _ in range(10_000):
        stored = await store.save(b"x", "foto.jpg", "image/jpeg")
        names.add(stored.file_name)
    assert len(names) == 10_000
    assert len(list(store.root.iterdir())) == 10_000
