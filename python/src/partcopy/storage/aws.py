"""AWS S3 storage service for partcopy.

Issues the multipart copy calls against S3 (or any S3-compatible endpoint)
via aiobotocore. Every copy is server-side: no object bytes pass through
this process.

Credentials are resolved via the standard AWS credential chain
(env vars, ~/.aws/credentials, IAM role, etc.) unless given explicitly.
"""

import logging
from typing import Any

from aiobotocore.session import AioSession
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class AWSStorageService:
    """Storage service backed by an aiobotocore S3 client.

    Attributes:
        region: The AWS region.
        endpoint_url: Custom endpoint for S3-compatible providers ("" = AWS).
        use_path_style: Use path-style addressing instead of virtual hosts.
    """

    def __init__(
        self,
        region: str = "us-east-1",
        endpoint_url: str = "",
        use_path_style: bool = False,
        access_key_id: str = "",
        secret_access_key: str = "",
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url
        self.use_path_style = use_path_style
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self._session = AioSession()
        self._client = None
        self._client_ctx = None

    async def init(self) -> None:
        """Create the aiobotocore S3 client."""
        client_kwargs: dict = {"region_name": self.region}
        if self.endpoint_url:
            client_kwargs["endpoint_url"] = self.endpoint_url
        if self.use_path_style:
            from botocore.config import Config as BotoConfig
            client_kwargs["config"] = BotoConfig(s3={"addressing_style": "path"})

        # Use explicit credentials if provided, otherwise fall back to chain
        if self.access_key_id and self.secret_access_key:
            session = AioSession()
            session.set_credentials(self.access_key_id, self.secret_access_key)
            self._session = session
        self._client_ctx = self._session.create_client("s3", **client_kwargs)
        self._client = await self._client_ctx.__aenter__()

        logger.info(
            "AWS storage service initialized: region=%s endpoint='%s'",
            self.region,
            self.endpoint_url,
        )

    async def close(self) -> None:
        """Close the aiobotocore client session."""
        if self._client_ctx is not None:
            await self._client_ctx.__aexit__(None, None, None)
            self._client = None
            self._client_ctx = None

    async def head_object(self, bucket: str, key: str) -> dict[str, Any]:
        """Fetch an object's metadata.

        Raises:
            FileNotFoundError: If the object does not exist.
        """
        try:
            return await self._client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in ("404", "NoSuchKey"):
                raise FileNotFoundError(f"Object not found: {bucket}/{key}") from e
            raise

    async def create_multipart_upload(
        self, bucket: str, key: str, options: dict[str, Any]
    ) -> str:
        resp = await self._client.create_multipart_upload(Bucket=bucket, Key=key, **options)
        return resp["UploadId"]

    async def upload_part_copy(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        copy_source: dict[str, str],
        copy_source_range: str,
    ) -> str:
        resp = await self._client.upload_part_copy(
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            PartNumber=part_number,
            CopySource=copy_source,
            CopySourceRange=copy_source_range,
        )
        return resp["CopyPartResult"]["ETag"]

    async def complete_multipart_upload(
        self, bucket: str, key: str, upload_id: str, parts: dict[str, Any]
    ) -> dict[str, Any]:
        resp = await self._client.complete_multipart_upload(
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            MultipartUpload=parts,
        )
        # Drop transport bookkeeping; callers get the S3 result fields only.
        return {k: v for k, v in resp.items() if k != "ResponseMetadata"}

    async def abort_multipart_upload(self, bucket: str, key: str, upload_id: str) -> None:
        await self._client.abort_multipart_upload(Bucket=bucket, Key=key, UploadId=upload_id)

    async def list_parts(self, bucket: str, key: str, upload_id: str) -> dict[str, Any]:
        """List every part still stored for an upload.

        Follows pagination so uploads with more than 1000 parts are fully
        listed. S3 answers NoSuchUpload once an abort has purged the upload;
        that is reported as an empty listing.
        """
        paginator = self._client.get_paginator("list_parts")
        parts: list[dict[str, Any]] = []
        try:
            async for page in paginator.paginate(Bucket=bucket, Key=key, UploadId=upload_id):
                parts.extend(page.get("Parts", []))
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code != "NoSuchUpload":
                raise
        return {"Bucket": bucket, "Key": key, "UploadId": upload_id, "Parts": parts}
