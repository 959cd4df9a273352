"""In-memory storage service for partcopy.

Implements the StorageService protocol with Python dictionaries, following
S3 multipart semantics closely enough to run a real copy end to end:
ranged part copies, ordered completion with composite ETags, and aborts
that purge stored parts. Errors are raised as botocore ``ClientError`` with
the codes S3 would return, so callers see the same exceptions as against
the AWS service.
"""

import hashlib
import logging
import re
import uuid
from typing import Any

from botocore.exceptions import ClientError

from partcopy.planner import MINIMUM_PART_SIZE

logger = logging.getLogger(__name__)

_RANGE_RE = re.compile(r"^bytes=(\d+)-(\d+)$")


def _client_error(code: str, message: str, operation: str) -> ClientError:
    """Build a ClientError shaped like a real S3 error response."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class MemoryStorageService:
    """Storage service that holds objects and uploads in memory.

    Objects are stored keyed by (bucket, key) with values of
    (data, etag, params). Parts are keyed by (upload_id, part_number).

    Attributes:
        minimum_part_size: Smallest size accepted for a non-final part at
            completion time.
    """

    def __init__(self, minimum_part_size: int = MINIMUM_PART_SIZE) -> None:
        self.minimum_part_size = minimum_part_size

        # Object storage: (bucket, key) -> (data, quoted etag, initiate params)
        self._objects: dict[tuple[str, str], tuple[bytes, str, dict[str, Any]]] = {}
        # Open uploads: upload_id -> (bucket, key, initiate params)
        self._uploads: dict[str, tuple[str, str, dict[str, Any]]] = {}
        # Part storage: (upload_id, part_number) -> (data, quoted etag)
        self._parts: dict[tuple[str, int], tuple[bytes, str]] = {}

    async def init(self) -> None:
        logger.info("Memory storage service initialized")

    async def close(self) -> None:
        self._objects.clear()
        self._uploads.clear()
        self._parts.clear()

    # -- Plain objects ----------------------------------------------------------

    async def put_object(self, bucket: str, key: str, data: bytes) -> str:
        """Store an object and return its quoted MD5 ETag."""
        etag = f'"{hashlib.md5(data).hexdigest()}"'
        self._objects[(bucket, key)] = (bytes(data), etag, {})
        return etag

    async def get_object(self, bucket: str, key: str) -> bytes:
        """Return an object's bytes.

        Raises:
            ClientError: NoSuchKey if the object does not exist.
        """
        obj = self._objects.get((bucket, key))
        if obj is None:
            raise _client_error("NoSuchKey", "The specified key does not exist.", "GetObject")
        return obj[0]

    async def head_object(self, bucket: str, key: str) -> dict[str, Any]:
        """Return an object's metadata.

        Raises:
            FileNotFoundError: If the object does not exist.
        """
        obj = self._objects.get((bucket, key))
        if obj is None:
            raise FileNotFoundError(f"Object not found: {bucket}/{key}")
        data, etag, params = obj
        return {"ContentLength": len(data), "ETag": etag, **params}

    # -- Multipart ----------------------------------------------------------------

    async def create_multipart_upload(
        self, bucket: str, key: str, options: dict[str, Any]
    ) -> str:
        upload_id = uuid.uuid4().hex
        self._uploads[upload_id] = (bucket, key, dict(options))
        return upload_id

    def _require_upload(self, bucket: str, key: str, upload_id: str, operation: str) -> None:
        upload = self._uploads.get(upload_id)
        if upload is None or upload[:2] != (bucket, key):
            raise _client_error(
                "NoSuchUpload", "The specified multipart upload does not exist.", operation
            )

    async def upload_part_copy(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        copy_source: dict[str, str],
        copy_source_range: str,
    ) -> str:
        self._require_upload(bucket, key, upload_id, "UploadPartCopy")
        source = self._objects.get((copy_source["Bucket"], copy_source["Key"]))
        if source is None:
            raise _client_error("NoSuchKey", "The specified key does not exist.", "UploadPartCopy")

        data = source[0]
        match = _RANGE_RE.match(copy_source_range)
        if match is None:
            raise _client_error("InvalidArgument", "Invalid copy source range.", "UploadPartCopy")
        start, end = int(match.group(1)), int(match.group(2))
        if start > end or end >= len(data):
            raise _client_error(
                "InvalidRange", "The requested range is not satisfiable.", "UploadPartCopy"
            )

        part_data = data[start : end + 1]
        etag = f'"{hashlib.md5(part_data).hexdigest()}"'
        self._parts[(upload_id, part_number)] = (part_data, etag)
        return etag

    async def complete_multipart_upload(
        self, bucket: str, key: str, upload_id: str, parts: dict[str, Any]
    ) -> dict[str, Any]:
        """Assemble the listed parts into the destination object.

        Raises:
            ClientError: NoSuchUpload, InvalidPart, InvalidPartOrder or
                EntityTooSmall, as S3 would.
        """
        op = "CompleteMultipartUpload"
        self._require_upload(bucket, key, upload_id, op)
        entries = parts.get("Parts", [])
        if not entries:
            raise _client_error("MalformedXML", "No parts were specified.", op)

        numbers = [entry["PartNumber"] for entry in entries]
        if numbers != sorted(numbers) or len(set(numbers)) != len(numbers):
            raise _client_error(
                "InvalidPartOrder", "The list of parts was not in ascending order.", op
            )

        chunks: list[bytes] = []
        digests = hashlib.md5()
        for i, entry in enumerate(entries):
            stored = self._parts.get((upload_id, entry["PartNumber"]))
            if stored is None or stored[1] != entry["ETag"]:
                raise _client_error(
                    "InvalidPart", "One or more of the specified parts could not be found.", op
                )
            part_data, part_etag = stored
            if i < len(entries) - 1 and len(part_data) < self.minimum_part_size:
                raise _client_error(
                    "EntityTooSmall",
                    "Your proposed upload is smaller than the minimum allowed object size.",
                    op,
                )
            chunks.append(part_data)
            digests.update(bytes.fromhex(part_etag.strip('"')))

        etag = f'"{digests.hexdigest()}-{len(entries)}"'
        _, _, params = self._uploads.pop(upload_id)
        self._objects[(bucket, key)] = (b"".join(chunks), etag, params)
        self._purge_parts(upload_id)

        return {
            "Location": f"/{bucket}/{key}",
            "Bucket": bucket,
            "Key": key,
            "ETag": etag,
        }

    async def abort_multipart_upload(self, bucket: str, key: str, upload_id: str) -> None:
        self._require_upload(bucket, key, upload_id, "AbortMultipartUpload")
        del self._uploads[upload_id]
        self._purge_parts(upload_id)

    async def list_parts(self, bucket: str, key: str, upload_id: str) -> dict[str, Any]:
        remaining = sorted(
            (pn, data, etag) for (uid, pn), (data, etag) in self._parts.items() if uid == upload_id
        )
        return {
            "Bucket": bucket,
            "Key": key,
            "UploadId": upload_id,
            "Parts": [
                {"PartNumber": pn, "ETag": etag, "Size": len(data)} for pn, data, etag in remaining
            ],
        }

    def _purge_parts(self, upload_id: str) -> None:
        for part_key in [pk for pk in self._parts if pk[0] == upload_id]:
            del self._parts[part_key]
