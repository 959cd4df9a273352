"""Data model types for partcopy.

These dataclasses describe one multipart copy: where the bytes come from and
go to, how they are split into parts, and what each part produced. All of
them are value objects owned by a single orchestration run.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

DEFAULT_ACL = "private"


@dataclass(frozen=True)
class ObjectLocation:
    """A bucket/key pair.

    Attributes:
        bucket: The bucket name.
        key: The object key.
    """

    bucket: str
    key: str

    @property
    def copy_source(self) -> dict[str, str]:
        """The CopySource value for an upload_part_copy call."""
        return {"Bucket": self.bucket, "Key": self.key}

    def __str__(self) -> str:
        return f"{self.bucket}/{self.key}"


# Request parameter name for each optional destination setting.
_OPTION_PARAMS = {
    "expires": "Expires",
    "server_side_encryption": "ServerSideEncryption",
    "content_type": "ContentType",
    "content_disposition": "ContentDisposition",
    "content_encoding": "ContentEncoding",
    "content_language": "ContentLanguage",
    "metadata": "Metadata",
    "cache_control": "CacheControl",
    "storage_class": "StorageClass",
}


@dataclass(frozen=True)
class DestinationOptions:
    """Settings applied to the copied object when the upload is initiated.

    Unset fields are left out of the initiate request entirely, except
    ``acl`` which falls back to a default canned ACL.

    Attributes:
        acl: Canned ACL for the new object, or None for the default.
        expires: Expires header value.
        server_side_encryption: SSE algorithm (e.g. "AES256", "aws:kms").
        content_type: MIME type.
        content_disposition: Content-Disposition header value.
        content_encoding: Content-Encoding header value.
        content_language: Content-Language header value.
        metadata: User metadata key-value mapping.
        cache_control: Cache-Control header value.
        storage_class: Storage class (e.g. "STANDARD", "GLACIER").
    """

    acl: str | None = None
    expires: datetime | str | None = None
    server_side_encryption: str | None = None
    content_type: str | None = None
    content_disposition: str | None = None
    content_encoding: str | None = None
    content_language: str | None = None
    metadata: dict[str, str] | None = None
    cache_control: str | None = None
    storage_class: str | None = None

    def to_params(self, default_acl: str = DEFAULT_ACL) -> dict[str, Any]:
        """Render the settings as create_multipart_upload keyword arguments."""
        params: dict[str, Any] = {"ACL": self.acl or default_acl}
        for name, param in _OPTION_PARAMS.items():
            value = getattr(self, name)
            if value:
                params[param] = value
        return params


@dataclass(frozen=True)
class CopyRequest:
    """Everything needed to copy one object with multipart copy.

    Attributes:
        source: Location of the object to copy.
        destination: Location of the new object.
        object_size: Size of the source object in bytes.
        part_size: Target part size in bytes, or None for the default.
        options: Settings for the destination object.
    """

    source: ObjectLocation
    destination: ObjectLocation
    object_size: int
    part_size: int | None = None
    options: DestinationOptions = field(default_factory=DestinationOptions)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CopyRequest:
        """Build a request from the flat snake_case option mapping.

        Recognised keys: source_bucket, object_key, destination_bucket,
        copied_object_name, object_size, copy_part_size_bytes,
        copied_object_permissions, expiration_period, plus one key per
        DestinationOptions field (content_type, metadata, ...).

        Raises:
            KeyError: If a required key is missing.
        """
        option_names = {f.name for f in fields(DestinationOptions)} - {"acl", "expires"}
        options = DestinationOptions(
            acl=data.get("copied_object_permissions"),
            expires=data.get("expiration_period"),
            **{name: data[name] for name in option_names if data.get(name) is not None},
        )
        return cls(
            source=ObjectLocation(data["source_bucket"], data["object_key"]),
            destination=ObjectLocation(data["destination_bucket"], data["copied_object_name"]),
            object_size=data["object_size"],
            part_size=data.get("copy_part_size_bytes"),
            options=options,
        )


@dataclass(frozen=True)
class PartRange:
    """An inclusive byte range of the source object copied as one part.

    Attributes:
        part_number: 1-based part number, dense across a plan.
        start: First byte offset (inclusive).
        end: Last byte offset (inclusive).
    """

    part_number: int
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    @property
    def header(self) -> str:
        """The CopySourceRange value, e.g. ``bytes=0-49999999``."""
        return f"bytes={self.start}-{self.end}"


@dataclass(frozen=True)
class PartResult:
    """The outcome of one successful part copy.

    Attributes:
        part_number: The part number the copy targeted.
        etag: The integrity tag returned by the service.
    """

    part_number: int
    etag: str


@dataclass(frozen=True)
class CompletionManifest:
    """Part results ordered by ascending part number."""

    parts: tuple[PartResult, ...]

    @classmethod
    def from_results(cls, results: list[PartResult]) -> CompletionManifest:
        return cls(parts=tuple(sorted(results, key=lambda r: r.part_number)))

    def to_params(self) -> dict[str, Any]:
        """Render as the MultipartUpload argument of complete_multipart_upload."""
        return {"Parts": [{"ETag": p.etag, "PartNumber": p.part_number} for p in self.parts]}


class CopyState(str, enum.Enum):
    """Lifecycle states of a multipart copy."""

    INITIATING = "Initiating"
    COPYING_PARTS = "CopyingParts"
    FINALIZING = "Finalizing"
    COMPLETED = "Completed"
    ABORTING = "Aborting"
    ABORT_VERIFIED = "AbortVerified"
    ABORT_FAILED = "AbortFailed"

    @property
    def terminal(self) -> bool:
        return self in (CopyState.COMPLETED, CopyState.ABORT_VERIFIED, CopyState.ABORT_FAILED)


@dataclass
class UploadSession:
    """A multipart upload opened for one copy.

    Attributes:
        upload_id: The identifier issued by the storage service.
        destination: The object the upload will create.
        state: Current lifecycle state.
    """

    upload_id: str
    destination: ObjectLocation
    state: CopyState = CopyState.COPYING_PARTS
