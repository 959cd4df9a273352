"""Server-side multipart copy of large objects between S3 buckets."""

from partcopy.coordinator import MultipartCopier, copy_object_multipart, resolve_object_size
from partcopy.errors import (
    AbortedError,
    AbortInconsistencyError,
    CopyError,
    FinalizationFailure,
    InitiationFailure,
    InvalidInput,
    PartCopyFailure,
)
from partcopy.models import CopyRequest, DestinationOptions, ObjectLocation
from partcopy.planner import DEFAULT_PART_SIZE, MINIMUM_PART_SIZE, plan_partitions

__all__ = [
    "AbortedError",
    "AbortInconsistencyError",
    "copy_object_multipart",
    "CopyError",
    "CopyRequest",
    "DEFAULT_PART_SIZE",
    "DestinationOptions",
    "FinalizationFailure",
    "InitiationFailure",
    "InvalidInput",
    "MINIMUM_PART_SIZE",
    "MultipartCopier",
    "ObjectLocation",
    "PartCopyFailure",
    "plan_partitions",
    "resolve_object_size",
]
