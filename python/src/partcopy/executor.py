"""Single part copy for multipart copy."""

import logging

from partcopy.models import ObjectLocation, PartRange, PartResult
from partcopy.storage.service import StorageService

logger = logging.getLogger(__name__)


async def copy_part(
    service: StorageService,
    source: ObjectLocation,
    destination: ObjectLocation,
    upload_id: str,
    part: PartRange,
) -> PartResult:
    """Copy one byte range of ``source`` into a part of an open upload.

    The part only becomes visible once the upload is completed. Errors from
    the service are not retried or wrapped; the caller decides what a failed
    part means for the whole copy.

    Args:
        service: The storage service holding both objects.
        source: The object being copied.
        destination: The object the upload will create.
        upload_id: The open multipart upload.
        part: The byte range and part number to copy.

    Returns:
        The part number with the ETag reported by the service.
    """
    logger.debug(
        "Copying part %d (%s) of %s",
        part.part_number,
        part.header,
        source,
        extra={"upload_id": upload_id, "part_number": part.part_number},
    )
    etag = await service.upload_part_copy(
        destination.bucket,
        destination.key,
        upload_id,
        part.part_number,
        source.copy_source,
        part.header,
    )
    return PartResult(part_number=part.part_number, etag=etag)
