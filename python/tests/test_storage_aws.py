"""Unit tests for the AWS S3 storage service.

All tests use mocked aiobotocore: no real AWS credentials or network
access required. The mock S3 client is injected directly onto
service._client to bypass session creation.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from conftest import client_error
from partcopy.storage.aws import AWSStorageService


def _make_service(region="us-east-1"):
    """Create an AWSStorageService with a mock client (skip init)."""
    service = AWSStorageService(region=region)
    service._client = AsyncMock()
    service._client_ctx = AsyncMock()
    return service


def _paginator(*pages):
    """A list_parts paginator mock yielding ``pages``."""

    async def _pages(**kwargs):
        for page in pages:
            yield page

    paginator = MagicMock()
    paginator.paginate = MagicMock(side_effect=lambda **kwargs: _pages(**kwargs))
    return paginator


class TestInit:
    """Tests for init() and close()."""

    async def test_init_creates_client(self):
        with patch("partcopy.storage.aws.AioSession") as mock_session_cls:
            mock_client = AsyncMock()
            mock_ctx = AsyncMock()
            mock_ctx.__aenter__ = AsyncMock(return_value=mock_client)
            mock_ctx.__aexit__ = AsyncMock(return_value=False)
            mock_session_cls.return_value.create_client.return_value = mock_ctx

            service = AWSStorageService(region="eu-west-1", endpoint_url="http://minio:9000")
            await service.init()

            mock_session_cls.return_value.create_client.assert_called_once_with(
                "s3", region_name="eu-west-1", endpoint_url="http://minio:9000"
            )
            assert service._client is mock_client
            await service.close()

    async def test_init_with_explicit_credentials(self):
        with patch("partcopy.storage.aws.AioSession") as mock_session_cls:
            mock_ctx = AsyncMock()
            mock_ctx.__aenter__ = AsyncMock(return_value=AsyncMock())
            mock_session_cls.return_value.create_client.return_value = mock_ctx

            service = AWSStorageService(access_key_id="AKIA", secret_access_key="secret")
            await service.init()

            mock_session_cls.return_value.set_credentials.assert_called_once_with(
                "AKIA", "secret"
            )

    async def test_close_exits_context(self):
        service = _make_service()
        ctx_ref = service._client_ctx
        await service.close()
        ctx_ref.__aexit__.assert_awaited_once()
        assert service._client is None
        assert service._client_ctx is None

    async def test_close_noop_when_not_initialized(self):
        service = AWSStorageService()
        await service.close()  # Should not raise


class TestHeadObject:
    """Tests for head_object()."""

    async def test_returns_response(self):
        service = _make_service()
        service._client.head_object = AsyncMock(return_value={"ContentLength": 42})
        assert (await service.head_object("b", "k"))["ContentLength"] == 42
        service._client.head_object.assert_awaited_once_with(Bucket="b", Key="k")

    async def test_404_raises_file_not_found(self):
        service = _make_service()
        service._client.head_object = AsyncMock(side_effect=client_error("404"))
        with pytest.raises(FileNotFoundError, match="Object not found"):
            await service.head_object("b", "k")

    async def test_other_error_propagates(self):
        service = _make_service()
        service._client.head_object = AsyncMock(side_effect=client_error("AccessDenied"))
        with pytest.raises(ClientError):
            await service.head_object("b", "k")


class TestMultipartCalls:
    """Tests for the multipart protocol calls."""

    async def test_create_passes_options(self):
        service = _make_service()
        service._client.create_multipart_upload = AsyncMock(return_value={"UploadId": "uid"})

        upload_id = await service.create_multipart_upload(
            "b", "k", {"ACL": "private", "StorageClass": "GLACIER"}
        )

        assert upload_id == "uid"
        service._client.create_multipart_upload.assert_awaited_once_with(
            Bucket="b", Key="k", ACL="private", StorageClass="GLACIER"
        )

    async def test_upload_part_copy_returns_etag(self):
        service = _make_service()
        service._client.upload_part_copy = AsyncMock(
            return_value={"CopyPartResult": {"ETag": '"partmd5"'}}
        )

        etag = await service.upload_part_copy(
            "dst", "k2", "uid", 3, {"Bucket": "src", "Key": "k"}, "bytes=0-99"
        )

        assert etag == '"partmd5"'
        service._client.upload_part_copy.assert_awaited_once_with(
            Bucket="dst",
            Key="k2",
            UploadId="uid",
            PartNumber=3,
            CopySource={"Bucket": "src", "Key": "k"},
            CopySourceRange="bytes=0-99",
        )

    async def test_complete_strips_response_metadata(self):
        service = _make_service()
        service._client.complete_multipart_upload = AsyncMock(
            return_value={
                "Location": "https://b.s3.amazonaws.com/k",
                "ETag": '"abc-2"',
                "ResponseMetadata": {"HTTPStatusCode": 200},
            }
        )
        parts = {"Parts": [{"ETag": '"a"', "PartNumber": 1}, {"ETag": '"b"', "PartNumber": 2}]}

        result = await service.complete_multipart_upload("b", "k", "uid", parts)

        assert result == {"Location": "https://b.s3.amazonaws.com/k", "ETag": '"abc-2"'}
        service._client.complete_multipart_upload.assert_awaited_once_with(
            Bucket="b", Key="k", UploadId="uid", MultipartUpload=parts
        )

    async def test_abort(self):
        service = _make_service()
        await service.abort_multipart_upload("b", "k", "uid")
        service._client.abort_multipart_upload.assert_awaited_once_with(
            Bucket="b", Key="k", UploadId="uid"
        )


class TestListParts:
    """Tests for list_parts()."""

    async def test_collects_all_pages(self):
        service = _make_service()
        paginator = _paginator(
            {"Parts": [{"PartNumber": 1}, {"PartNumber": 2}]},
            {"Parts": [{"PartNumber": 3}]},
        )
        service._client.get_paginator = MagicMock(return_value=paginator)

        result = await service.list_parts("b", "k", "uid")

        assert [p["PartNumber"] for p in result["Parts"]] == [1, 2, 3]
        service._client.get_paginator.assert_called_once_with("list_parts")
        paginator.paginate.assert_called_once_with(Bucket="b", Key="k", UploadId="uid")

    async def test_empty_listing(self):
        service = _make_service()
        service._client.get_paginator = MagicMock(return_value=_paginator({}))
        assert (await service.list_parts("b", "k", "uid"))["Parts"] == []

    async def test_no_such_upload_is_empty_listing(self):
        """S3 forgets an aborted upload entirely; nothing remains."""
        service = _make_service()
        paginator = MagicMock()
        paginator.paginate = MagicMock(side_effect=client_error("NoSuchUpload"))
        service._client.get_paginator = MagicMock(return_value=paginator)

        result = await service.list_parts("b", "k", "uid")

        assert result["Parts"] == []
        assert result["UploadId"] == "uid"

    async def test_other_error_propagates(self):
        service = _make_service()
        paginator = MagicMock()
        paginator.paginate = MagicMock(side_effect=client_error("AccessDenied"))
        service._client.get_paginator = MagicMock(return_value=paginator)

        with pytest.raises(ClientError):
            await service.list_parts("b", "k", "uid")
