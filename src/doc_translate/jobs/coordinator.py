# SPDX-License-Identifier: Apache-2.0
"""Document translation job: submit -> poll status -> fetch result."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
import uuid
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from doc_translate.config import ClientConfig
from doc_translate.deepl.client import (
    DOCUMENT_UPLOAD_REQUEST_ID,
    DeepLClient,
    result_request_id,
    status_request_id,
)
from doc_translate.deepl.languages import TargetLanguage
from doc_translate.deepl.models import DocumentHandle
from doc_translate.jobs.errors import (
    JobError,
    JobFailedError,
    JobTimeoutError,
    UnknownStatusError,
)
from doc_translate.jobs.models import JobPhase, JobStatus, TranslationJob
from doc_translate.network.errors import APIError, ServerError
from doc_translate.network.executor import SleepFunc
from doc_translate.network.result import Result, ResultCallback

logger = logging.getLogger(__name__)

RESULT_FILE_PREFIX = "translated_document_"


def _describe(error: APIError) -> str:
    if isinstance(error, ServerError):
        return error.message or f"Server error: {error.status_code}"
    return str(error)


@dataclass
class JobState:
    """Mutable progress of one job, shared between coordinator and handle."""

    job_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    phase: JobPhase = JobPhase.PENDING
    job: TranslationJob | None = None
    active_request_id: str | None = None


class JobHandle:
    """Cancellable handle for a running document job.

    Awaiting the handle returns the path of the downloaded document.
    """

    def __init__(
        self,
        client: DeepLClient,
        state: JobState,
        task: asyncio.Task[Path],
    ) -> None:
        self._client = client
        self._state = state
        self._task = task

    @property
    def job_id(self) -> str:
        """Return the local job identifier."""
        return self._state.job_id

    @property
    def phase(self) -> JobPhase:
        """Return the current phase."""
        return self._state.phase

    @property
    def job(self) -> TranslationJob | None:
        """Return the server job, once submitted."""
        return self._state.job

    def done(self) -> bool:
        """Return whether the job task has finished."""
        return self._task.done()

    def cancel(self) -> bool:
        """Abort the job: pending poll timers and the in-flight request.

        Returns:
            False if the job had already finished.
        """
        if self._task.done():
            return False
        request_id = self._state.active_request_id
        self._task.cancel()
        # A task cancelled before its first step never reaches _run's handler
        if not self._state.phase.is_finished:
            self._state.phase = JobPhase.FAILED
        if request_id is not None:
            self._client.cancel(request_id)
        logger.info("Cancelled document job %s", self._state.job_id)
        return True

    def add_done_callback(self, callback: ResultCallback[Path]) -> None:
        """Deliver the job outcome to ``callback`` (not called if cancelled)."""

        def _deliver(task: asyncio.Task[Path]) -> None:
            if task.cancelled():
                return
            error = task.exception()
            if error is not None:
                callback(Result.failure(error))
            else:
                callback(Result.success(task.result()))

        self._task.add_done_callback(_deliver)

    def __await__(self) -> Generator[Any, None, Path]:
        return self._task.__await__()


class DocumentJobCoordinator:
    """Drives document translation jobs to completion or failure.

    Steps run strictly one after another: upload, then constant-interval
    status polls until a terminal status, then the download.
    """

    def __init__(
        self,
        client: DeepLClient,
        config: ClientConfig | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize DocumentJobCoordinator.

        Args:
            client: DeepL API client.
            config: Polling and output settings.
            sleep: Non-blocking delay coroutine used between polls.
        """
        self._client = client
        self._config = config or ClientConfig()
        self._sleep = sleep

    async def translate_document(
        self,
        payload: bytes,
        target_lang: TargetLanguage | str,
        filename: str = "document.pdf",
    ) -> Path:
        """Translate a document and return the path of the result.

        Args:
            payload: Document bytes (PDF).
            target_lang: Target language code.
            filename: File name sent with the upload; its suffix is reused
                for the downloaded file.

        Returns:
            Path of a temporary file holding the translated document.

        Raises:
            JobError: On any terminal failure.
        """
        return await self._run(JobState(), payload, target_lang, filename)

    def start(
        self,
        payload: bytes,
        target_lang: TargetLanguage | str,
        filename: str = "document.pdf",
        callback: ResultCallback[Path] | None = None,
    ) -> JobHandle:
        """Start a job in the background and return its handle."""
        state = JobState()
        task = asyncio.get_running_loop().create_task(
            self._run(state, payload, target_lang, filename),
            name=f"document-job:{state.job_id}",
        )
        handle = JobHandle(self._client, state, task)
        if callback is not None:
            handle.add_done_callback(callback)
        return handle

    async def _run(
        self,
        state: JobState,
        payload: bytes,
        target_lang: TargetLanguage | str,
        filename: str,
    ) -> Path:
        try:
            state.phase = JobPhase.SUBMITTING
            handle = await self._submit(state, payload, target_lang, filename)
            state.job = TranslationJob(handle.document_id, handle.document_key)

            state.phase = JobPhase.POLLING
            await self._poll(state, state.job)

            state.phase = JobPhase.FETCHING
            path = await self._fetch(state, state.job, Path(filename).suffix)
        except JobError as e:
            state.phase = JobPhase.FAILED
            logger.warning("Document job %s failed during %s: %s", state.job_id, e.stage, e)
            raise
        except asyncio.CancelledError:
            state.phase = JobPhase.FAILED
            raise
        finally:
            state.active_request_id = None

        state.phase = JobPhase.DONE
        logger.info("Document job %s finished: %s", state.job_id, path)
        return path

    async def _submit(
        self,
        state: JobState,
        payload: bytes,
        target_lang: TargetLanguage | str,
        filename: str,
    ) -> DocumentHandle:
        request_id = f"{DOCUMENT_UPLOAD_REQUEST_ID}:{state.job_id}"
        state.active_request_id = request_id
        try:
            return await self._client.upload_document(
                payload, target_lang, filename=filename, request_id=request_id
            )
        except APIError as e:
            raise JobFailedError(_describe(e), stage="submit", cause=e) from e

    async def _poll(self, state: JobState, job: TranslationJob) -> None:
        handle = DocumentHandle(document_id=job.document_id, document_key=job.document_key)
        interval = self._config.poll_interval
        max_polls = self._config.max_polls
        loop = asyncio.get_running_loop()
        deadline = None
        if self._config.poll_timeout is not None:
            deadline = loop.time() + self._config.poll_timeout

        state.active_request_id = status_request_id(job.document_id)
        while True:
            if job.polls >= max_polls:
                raise JobTimeoutError(
                    f"Document {job.document_id} not translated after {job.polls} polls",
                    stage="poll",
                )

            try:
                response = await self._client.document_status(handle)
            except APIError as e:
                raise JobFailedError(_describe(e), stage="poll", cause=e) from e
            job.polls += 1

            try:
                status = JobStatus(response.status)
            except ValueError:
                raise UnknownStatusError(response.status) from None

            job.advance(status, response.error_message)
            job.seconds_remaining = response.seconds_remaining

            if status is JobStatus.DONE:
                return
            if status is JobStatus.ERROR:
                message = response.error_message or "Unknown error"
                job.error_message = message
                raise JobFailedError(message, stage="poll")

            if deadline is not None and loop.time() + interval > deadline:
                raise JobTimeoutError(
                    f"Document {job.document_id} not translated within "
                    f"{self._config.poll_timeout}s",
                    stage="poll",
                )
            logger.debug(
                "Document %s is %s (poll %d), next poll in %.1fs",
                job.document_id,
                status.value,
                job.polls,
                interval,
            )
            await self._sleep(interval)

    async def _fetch(self, state: JobState, job: TranslationJob, suffix: str) -> Path:
        handle = DocumentHandle(document_id=job.document_id, document_key=job.document_key)
        state.active_request_id = result_request_id(job.document_id)
        try:
            data = await self._client.download_document(handle)
        except APIError as e:
            raise JobFailedError(_describe(e), stage="fetch", cause=e) from e

        if not data:
            raise JobFailedError("result empty", stage="fetch")

        try:
            return await asyncio.to_thread(self._write_result, data, suffix)
        except OSError as e:
            raise JobFailedError(
                f"Failed to save translated document: {e}", stage="fetch", cause=e
            ) from e

    def _write_result(self, data: bytes, suffix: str) -> Path:
        output_dir = self._config.output_dir
        if output_dir is not None:
            output_dir.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(
            prefix=RESULT_FILE_PREFIX,
            suffix=suffix,
            dir=output_dir,
        )
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        return Path(name)
