from __future__ import annotations

import io

import pytest
from botocore.response import StreamingBody
from botocore.stub import Stubber

from src.application.errors import ObjectNotFound, StorageUnavailable
from src.infrastructure.storage.s3 import S3ObjectStore


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture()
def store() -> S3ObjectStore:
    return S3ObjectStore(bucket="dealer-assets", region="us-east-1")


async def test_mint_write_url_targets_a_fresh_upload_key(store):
    first = await store.mint_write_url("image/png", expires_seconds=900)
    second = await store.mint_write_url("image/png", expires_seconds=900)

    assert first.object_path.startswith("/objects/uploads/")
    assert first.object_path != second.object_path
    assert first.object_path.rsplit("/", 1)[1] in first.write_url
    assert first.write_url.startswith("https://")


@pytest.mark.parametrize(
    "url",
    [
        "https://dealer-assets.s3.amazonaws.com/uploads/abc-123?X-Amz-Signature=x",
        "https://s3.us-east-1.amazonaws.com/dealer-assets/uploads/abc-123?X-Amz-Signature=x",
        "http://localhost:9000/dealer-assets/uploads/abc-123",
    ],
)
def test_normalize_object_path_handles_both_url_styles(store, url):
    assert store.normalize_object_path(url) == "/objects/uploads/abc-123"


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/images/car.png",
        "https://dealer-assets.s3.amazonaws.com/private/abc",
        "/api/files/1700000000000-abc.png",
    ],
)
def test_foreign_urls_are_returned_unchanged(store, url):
    assert store.normalize_object_path(url) == url


def test_prefix_is_stripped_from_object_paths():
    store = S3ObjectStore(bucket="dealer-assets", region="us-east-1", prefix="prod/")
    url = "https://dealer-assets.s3.amazonaws.com/prod/uploads/abc?X-Amz-Expires=900"

    assert store.normalize_object_path(url) == "/objects/uploads/abc"


async def test_open_object_streams_the_body(store):
    data = b"%PDF-1.7 contrato"
    with Stubber(store._s3) as stubber:
        stubber.add_response(
            "get_object",
            {
                "Body": StreamingBody(io.BytesIO(data), len(data)),
                "ContentType": "application/pdf",
                "ContentLength": len(data),
            },
            {"Bucket": "dealer-assets", "Key": "uploads/abc"},
        )
        stream = await store.open_object("/objects/uploads/abc")
        received = b"".join([chunk async for chunk in stream.chunks])

    assert received == data
    assert stream.content_type == "application/pdf"
    assert stream.size_bytes == len(data)


async def test_missing_object_is_not_found(store):
    with Stubber(store._s3) as stubber:
        stubber.add_client_error(
            "get_object", service_error_code="NoSuchKey", http_status_code=404
        )
        with pytest.raises(ObjectNotFound):
            await store.open_object("/objects/uploads/missing")


async def test_other_storage_errors_are_unavailable(store):
    with Stubber(store._s3) as stubber:
        stubber.add_client_error(
            "get_object", service_error_code="InternalError", http_status_code=500
        )
        with pytest.raises(StorageUnavailable):
            await store.open_object("/objects/uploads/abc")


@pytest.mark.parametrize("path", ["/api/files/x.png", "/objects/", "/objects/uploads/../secret"])
async def test_paths_outside_the_object_namespace_are_not_found(store, path):
    with pytest.raises(ObjectNotFound):
        await store.open_object(path)
