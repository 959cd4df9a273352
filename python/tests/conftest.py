"""Shared pytest fixtures for partcopy tests.

The storage collaborator is an ``AsyncMock`` for orchestration tests, so
every call the copier makes can be asserted on. End-to-end copies run
against ``MemoryStorageService`` instead.
"""

from unittest.mock import AsyncMock

import pytest
from botocore.exceptions import ClientError

from partcopy.models import CopyRequest, ObjectLocation
from partcopy.planner import MINIMUM_PART_SIZE
from partcopy.storage.memory import MemoryStorageService

UPLOAD_ID = "upload-1"


def client_error(code: str, message: str = "error") -> ClientError:
    """Create a botocore ClientError with the given error code."""
    return ClientError(
        {"Error": {"Code": code, "Message": message}},
        "TestOperation",
    )


def make_request(parts: int = 3, **kwargs) -> CopyRequest:
    """A request that plans exactly ``parts`` minimum-size parts."""
    fields = {
        "source": ObjectLocation("src-bucket", "src/key.bin"),
        "destination": ObjectLocation("dst-bucket", "dst/key.bin"),
        "object_size": parts * MINIMUM_PART_SIZE,
        "part_size": MINIMUM_PART_SIZE,
    }
    fields.update(kwargs)
    return CopyRequest(**fields)


@pytest.fixture
def service() -> AsyncMock:
    """A storage service mock that succeeds at every call."""
    mock = AsyncMock()
    mock.create_multipart_upload.return_value = UPLOAD_ID

    async def _copy(bucket, key, upload_id, part_number, copy_source, copy_source_range):
        return f'"etag-{part_number}"'

    mock.upload_part_copy.side_effect = _copy
    mock.complete_multipart_upload.return_value = {
        "Location": "https://dst-bucket.s3.amazonaws.com/dst/key.bin",
        "Bucket": "dst-bucket",
        "Key": "dst/key.bin",
        "ETag": '"final-3"',
    }
    mock.abort_multipart_upload.return_value = None
    mock.list_parts.return_value = {"Parts": []}
    return mock


@pytest.fixture
async def memory_service() -> MemoryStorageService:
    """An initialized in-memory storage service."""
    svc = MemoryStorageService()
    await svc.init()
    yield svc
    await svc.close()
