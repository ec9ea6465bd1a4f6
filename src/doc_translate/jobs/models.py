# SPDX-License-Identifier: Apache-2.0
"""Document job state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class JobStatus(str, Enum):
    """Server-side status of a document translation."""

    QUEUED = "queued"
    TRANSLATING = "translating"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.ERROR)

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    JobStatus.QUEUED: 0,
    JobStatus.TRANSLATING: 1,
    JobStatus.DONE: 2,
    JobStatus.ERROR: 2,
}


class JobPhase(str, Enum):
    """Client-side phase of the submit -> poll -> fetch protocol."""

    PENDING = "pending"
    SUBMITTING = "submitting"
    POLLING = "polling"
    FETCHING = "fetching"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_finished(self) -> bool:
        return self in (JobPhase.DONE, JobPhase.FAILED)


@dataclass
class TranslationJob:
    """A document accepted by the server.

    Status only moves forward; once terminal it never changes again.
    """

    document_id: str
    document_key: str
    status: JobStatus = JobStatus.QUEUED
    error_message: str | None = None
    polls: int = 0
    seconds_remaining: int | None = None

    def advance(self, status: JobStatus, error_message: str | None = None) -> bool:
        """Move to ``status`` if that is a forward transition.

        Returns:
            True if the status changed.

        Raises:
            ValueError: If the job is already terminal and ``status`` differs.
        """
        if self.status.is_terminal:
            if status is self.status:
                return False
            raise ValueError(
                f"Job {self.document_id} is already {self.status.value}; "
                f"cannot move to {status.value}"
            )
        if status.rank <= self.status.rank:
            return False
        self.status = status
        if status is JobStatus.ERROR:
            self.error_message = error_message
        return True
