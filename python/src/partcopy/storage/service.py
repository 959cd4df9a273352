"""Abstract storage service protocol for partcopy."""

from typing import Any, Protocol


class StorageService(Protocol):
    """Protocol defining the object storage calls a multipart copy needs.

    Implementations wrap a concrete provider (AWS S3 via aiobotocore, or the
    in-memory service). Errors are raised as the provider raises them; the
    copier decides what each one means.
    """

    async def init(self) -> None:
        """Initialize the service (open clients, connections, etc.)."""
        ...

    async def close(self) -> None:
        """Release resources held by the service."""
        ...

    async def head_object(self, bucket: str, key: str) -> dict[str, Any]:
        """Fetch an object's metadata.

        Returns:
            A dict containing at least ``ContentLength``.
        """
        ...

    async def create_multipart_upload(
        self, bucket: str, key: str, options: dict[str, Any]
    ) -> str:
        """Open a multipart upload for ``bucket/key``.

        Args:
            bucket: The destination bucket.
            key: The destination key.
            options: Extra request parameters (ACL, ContentType, Metadata, ...).

        Returns:
            The upload id.
        """
        ...

    async def upload_part_copy(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        copy_source: dict[str, str],
        copy_source_range: str,
    ) -> str:
        """Copy a byte range of an existing object into an upload part.

        Args:
            bucket: The destination bucket.
            key: The destination key.
            upload_id: The open multipart upload.
            part_number: The part number to write.
            copy_source: ``{"Bucket": ..., "Key": ...}`` of the source object.
            copy_source_range: ``bytes=start-end`` (inclusive).

        Returns:
            The ETag of the copied part.
        """
        ...

    async def complete_multipart_upload(
        self, bucket: str, key: str, upload_id: str, parts: dict[str, Any]
    ) -> dict[str, Any]:
        """Assemble the uploaded parts into the final object.

        Args:
            parts: ``{"Parts": [{"ETag": ..., "PartNumber": ...}, ...]}``.

        Returns:
            The service's completion response (Location, Bucket, Key, ETag).
        """
        ...

    async def abort_multipart_upload(self, bucket: str, key: str, upload_id: str) -> None:
        """Abort an upload and discard its parts."""
        ...

    async def list_parts(self, bucket: str, key: str, upload_id: str) -> dict[str, Any]:
        """List the parts stored for an upload.

        Returns:
            A dict with a ``Parts`` list (empty when nothing remains).
        """
        ...
