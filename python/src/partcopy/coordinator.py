"""Multipart copy orchestration for partcopy.

Drives one server-side copy through the multipart protocol:

    Initiating -> CopyingParts -> Finalizing -> Completed
    Initiating -> CopyingParts -> Aborting -> AbortVerified | AbortFailed

Parts are copied concurrently and joined; the completion manifest is always
sent in ascending part-number order regardless of completion order. When any
part fails the whole upload is aborted and the abort is verified by listing
the upload's remaining parts. A failed part never yields a successful return:
even a clean abort is raised as ``AbortedError``.

No stage is retried here. Retries inside the SDK are botocore's business and
retrying a whole copy is the caller's.
"""

import asyncio
import logging
from typing import Any, NoReturn

from botocore.exceptions import ClientError

from partcopy import metrics
from partcopy.config import CopySettings
from partcopy.errors import (
    AbortedError,
    AbortInconsistencyError,
    FinalizationFailure,
    InitiationFailure,
    InvalidInput,
    PartCopyFailure,
)
from partcopy.executor import copy_part
from partcopy.models import (
    CompletionManifest,
    CopyRequest,
    CopyState,
    ObjectLocation,
    PartRange,
    PartResult,
    UploadSession,
)
from partcopy.planner import plan_partitions
from partcopy.storage.service import StorageService
from partcopy.validation import validate_bucket_name, validate_object_key, validate_object_size

logger = logging.getLogger(__name__)


class MultipartCopier:
    """Copies objects with the multipart copy protocol.

    The copier owns the upload session of the copy it is running: nothing
    else completes or aborts it. Run one copy at a time per instance; the
    ``state`` and ``session`` attributes describe the most recent copy.

    Attributes:
        service: The storage service to copy through.
        settings: Part size, concurrency and ACL defaults.
        state: Lifecycle state of the most recent copy, or None before any.
        session: Upload session of the most recent copy, once initiated.
    """

    def __init__(self, service: StorageService, settings: CopySettings | None = None) -> None:
        self.service = service
        self.settings = settings or CopySettings()
        self.state: CopyState | None = None
        self.session: UploadSession | None = None

    def _transition(self, state: CopyState, extra: dict[str, Any]) -> None:
        self.state = state
        if self.session is not None:
            self.session.state = state
        logger.debug("Multipart copy -> %s", state.value, extra={**extra, "state": state.value})

    async def copy(self, request: CopyRequest, request_context: str | None = None) -> dict[str, Any]:
        """Copy ``request.source`` to ``request.destination``.

        Args:
            request: What to copy and how.
            request_context: Opaque id attached to log records only.

        Returns:
            The service's complete_multipart_upload response.

        Raises:
            InvalidInput: Bad locations or sizes; nothing was sent.
            InitiationFailure: The upload could not be opened.
            FinalizationFailure: All parts copied but completion failed.
            AbortedError: A part failed; the upload was aborted cleanly.
            AbortInconsistencyError: A part failed; the abort passed but
                parts remain listed.
        """
        extra: dict[str, Any] = {
            "request_id": request_context,
            "bucket": request.destination.bucket,
            "key": request.destination.key,
        }
        self.session = None

        try:
            ranges = self._plan(request)
            semaphore = self._limiter()
        except InvalidInput:
            metrics.record_outcome("invalid_input")
            raise

        self._transition(CopyState.INITIATING, extra)
        upload_id = await self._initiate(request, extra)
        self.session = UploadSession(upload_id=upload_id, destination=request.destination)
        extra["upload_id"] = upload_id
        self._transition(CopyState.COPYING_PARTS, extra)

        try:
            results = await self._copy_parts(request, upload_id, ranges, semaphore)
        except PartCopyFailure as failure:
            logger.warning(
                "Part copy failed, aborting multipart copy of %s: %s",
                request.source,
                failure.__cause__,
                extra=extra,
            )
            await self._abort(request.destination, upload_id, failure, extra)

        manifest = CompletionManifest.from_results(results)
        self._transition(CopyState.FINALIZING, extra)
        response = await self._finalize(request.destination, upload_id, manifest, extra)

        self._transition(CopyState.COMPLETED, extra)
        metrics.record_outcome("completed")
        metrics.record_completed(len(manifest.parts), request.object_size)
        logger.info(
            "Copied %s to %s in %d parts",
            request.source,
            request.destination,
            len(manifest.parts),
            extra=extra,
        )
        return response

    def _plan(self, request: CopyRequest) -> list[PartRange]:
        for location in (request.source, request.destination):
            validate_bucket_name(location.bucket)
            validate_object_key(location.key)
        validate_object_size(request.object_size)
        part_size = request.part_size if request.part_size is not None else self.settings.part_size
        return plan_partitions(request.object_size, part_size)

    def _limiter(self) -> asyncio.Semaphore | None:
        limit = self.settings.max_concurrency
        if limit < 0:
            raise InvalidInput(f"max_concurrency must be 0 or more, got {limit}")
        return asyncio.Semaphore(limit) if limit else None

    async def _initiate(self, request: CopyRequest, extra: dict[str, Any]) -> str:
        dest = request.destination
        options = request.options.to_params(default_acl=self.settings.default_acl)
        try:
            return await self.service.create_multipart_upload(dest.bucket, dest.key, options)
        except ClientError as e:
            logger.error("Failed to initiate multipart copy to %s", dest, extra=extra)
            metrics.record_outcome("initiation_failed")
            raise InitiationFailure(dest.bucket, dest.key) from e

    async def _copy_parts(
        self,
        request: CopyRequest,
        upload_id: str,
        ranges: list[PartRange],
        semaphore: asyncio.Semaphore | None,
    ) -> list[PartResult]:
        """Copy every range concurrently and join them all.

        Raises:
            PartCopyFailure: For the lowest-numbered failed part, once every
                copy has settled.
        """

        async def run(part: PartRange) -> PartResult:
            if semaphore is None:
                return await copy_part(
                    self.service, request.source, request.destination, upload_id, part
                )
            async with semaphore:
                return await copy_part(
                    self.service, request.source, request.destination, upload_id, part
                )

        outcomes = await asyncio.gather(*(run(part) for part in ranges), return_exceptions=True)

        failed = [
            (part, outcome)
            for part, outcome in zip(ranges, outcomes)
            if isinstance(outcome, BaseException)
        ]
        if failed:
            part, error = failed[0]
            if len(failed) > 1:
                logger.debug("%d of %d part copies failed", len(failed), len(ranges))
            raise PartCopyFailure(part.part_number, part.header, upload_id) from error

        return list(outcomes)

    async def _finalize(
        self,
        dest: ObjectLocation,
        upload_id: str,
        manifest: CompletionManifest,
        extra: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            return await self.service.complete_multipart_upload(
                dest.bucket, dest.key, upload_id, manifest.to_params()
            )
        except ClientError as e:
            logger.error("Failed to complete multipart copy to %s", dest, extra=extra)
            metrics.record_outcome("finalization_failed")
            raise FinalizationFailure(upload_id) from e

    async def _abort(
        self,
        dest: ObjectLocation,
        upload_id: str,
        failure: PartCopyFailure,
        extra: dict[str, Any],
    ) -> NoReturn:
        """Abort the upload, verify its parts are gone, and raise the outcome.

        Errors from the abort or listing calls propagate unchanged, with the
        part failure as their context.
        """
        self._transition(CopyState.ABORTING, extra)
        params = {"Bucket": dest.bucket, "Key": dest.key, "UploadId": upload_id}
        try:
            await self.service.abort_multipart_upload(dest.bucket, dest.key, upload_id)
            parts_list = await self.service.list_parts(dest.bucket, dest.key, upload_id)
        except Exception:
            self._transition(CopyState.ABORT_FAILED, extra)
            metrics.record_outcome("abort_error")
            raise

        if parts_list.get("Parts"):
            self._transition(CopyState.ABORT_FAILED, extra)
            metrics.record_outcome("abort_inconsistent")
            logger.error(
                "Abort of %s passed but %d parts remain",
                upload_id,
                len(parts_list["Parts"]),
                extra=extra,
            )
            raise AbortInconsistencyError(parts_list, failure) from failure

        self._transition(CopyState.ABORT_VERIFIED, extra)
        metrics.record_outcome("aborted")
        raise AbortedError(params, failure) from failure


async def resolve_object_size(service: StorageService, source: ObjectLocation) -> int:
    """Look up the size of ``source`` with a head request."""
    head = await service.head_object(source.bucket, source.key)
    return int(head["ContentLength"])


async def copy_object_multipart(
    service: StorageService,
    options: dict[str, Any],
    request_context: str | None = None,
    settings: CopySettings | None = None,
) -> dict[str, Any]:
    """Copy an object described by the flat option mapping.

    See ``CopyRequest.from_dict`` for the recognised keys. A missing
    required key is reported as ``InvalidInput`` before anything is sent.
    """
    try:
        request = CopyRequest.from_dict(options)
    except KeyError as e:
        raise InvalidInput(f"Missing required copy option: {e.args[0]}") from e
    return await MultipartCopier(service, settings).copy(request, request_context)
