# SPDX-License-Identifier: Apache-2.0
"""Long-running document translation jobs."""

from doc_translate.jobs.coordinator import DocumentJobCoordinator, JobHandle, JobState
from doc_translate.jobs.errors import (
    JobError,
    JobFailedError,
    JobTimeoutError,
    UnknownStatusError,
)
from doc_translate.jobs.models import JobPhase, JobStatus, TranslationJob

__all__ = [
    "DocumentJobCoordinator",
    "JobError",
    "JobFailedError",
    "JobHandle",
    "JobPhase",
    "JobState",
    "JobStatus",
    "JobTimeoutError",
    "TranslationJob",
    "UnknownStatusError",
]
