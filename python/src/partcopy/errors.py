"""Multipart copy error definitions for partcopy."""

from typing import Any


class CopyError(Exception):
    """A multipart copy error with a stable code, message, and details.

    Attributes:
        code: Machine-readable error code (e.g. "InvalidInput", "Aborted").
        message: Human-readable error description.
        details: Diagnostic payload attached to the error (request
            parameters, a parts listing, ...). Empty dict when absent.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the copy error.

        Args:
            code: Error code.
            message: Error description.
            details: Optional diagnostic payload.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


# -- Pre-flight ----------------------------------------------------------------


class InvalidInput(CopyError):
    """Malformed copy parameters, rejected before any network call."""

    def __init__(self, message: str = "Invalid copy parameters.") -> None:
        super().__init__(code="InvalidInput", message=message)


# -- Protocol stages ------------------------------------------------------------


class InitiationFailure(CopyError):
    """The initiate call failed; no upload session exists."""

    def __init__(self, bucket: str = "", key: str = "") -> None:
        super().__init__(
            code="InitiationFailure",
            message="Failed to initiate multipart copy.",
            details={"Bucket": bucket, "Key": key} if bucket else {},
        )


class PartCopyFailure(CopyError):
    """A single part copy failed.

    The service error that caused it is chained as ``__cause__``.
    """

    def __init__(self, part_number: int, byte_range: str = "", upload_id: str = "") -> None:
        details: dict[str, Any] = {"PartNumber": part_number}
        if byte_range:
            details["CopySourceRange"] = byte_range
        if upload_id:
            details["UploadId"] = upload_id
        super().__init__(
            code="PartCopyFailure",
            message=f"Copy of part {part_number} failed.",
            details=details,
        )
        self.part_number = part_number


class FinalizationFailure(CopyError):
    """The complete call failed after every part was copied."""

    def __init__(self, upload_id: str = "") -> None:
        super().__init__(
            code="FinalizationFailure",
            message="Failed to complete multipart copy.",
            details={"UploadId": upload_id} if upload_id else {},
        )


# -- Abort outcomes -------------------------------------------------------------


class AbortedError(CopyError):
    """The copy was aborted and its parts were verified removed.

    Attributes:
        part_failure: The part copy failure that triggered the abort.
    """

    def __init__(
        self,
        params: dict[str, Any] | None = None,
        part_failure: PartCopyFailure | None = None,
    ) -> None:
        super().__init__(
            code="Aborted",
            message="multipart copy aborted",
            details=params,
        )
        self.part_failure = part_failure


class AbortInconsistencyError(CopyError):
    """The abort call passed but the listing still shows uploaded parts.

    ``details`` holds the list-parts response for operator inspection.
    """

    def __init__(
        self,
        parts_list: dict[str, Any] | None = None,
        part_failure: PartCopyFailure | None = None,
    ) -> None:
        super().__init__(
            code="AbortInconsistency",
            message="Abort procedure passed but copy parts were not removed",
            details=parts_list,
        )
        self.part_failure = part_failure
