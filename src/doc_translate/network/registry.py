# SPDX-License-Identifier: Apache-2.0
"""Registry of in-flight requests, keyed by caller-chosen identifiers."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Cancellable(Protocol):
    """Anything that can be cancelled (``asyncio.Task``, futures, ...)."""

    def cancel(self) -> Any: ...


@dataclass(frozen=True)
class TaskToken:
    """Identifies one registration.

    ``generation`` is unique per registration, so a token for a replaced
    handle never matches the current entry again.
    """

    identifier: str
    generation: int


@dataclass
class _Entry:
    token: TaskToken
    handle: Cancellable


class TaskRegistry:
    """Maps identifier -> in-flight cancellable handle.

    At most one handle exists per identifier. All mutations go through a
    single lock; handles are cancelled after the lock is released.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}
        self._generations = itertools.count(1)

    def register(self, identifier: str, handle: Cancellable) -> TaskToken:
        """Store ``handle`` under ``identifier``, cancelling any previous one.

        Args:
            identifier: Caller-chosen name of the logical operation.
            handle: Cancellable handle of the new operation.

        Returns:
            Token for this registration (pass it to ``complete``).
        """
        with self._lock:
            previous = self._entries.pop(identifier, None)
            token = TaskToken(identifier, next(self._generations))
            self._entries[identifier] = _Entry(token, handle)

        if previous is not None and previous.handle is not handle:
            logger.debug("Replacing active task %r", identifier)
            previous.handle.cancel()
        return token

    def cancel(self, identifier: str) -> bool:
        """Cancel and remove the handle for ``identifier``.

        Returns:
            True if a handle was cancelled, False if none was registered.
        """
        with self._lock:
            entry = self._entries.pop(identifier, None)

        if entry is None:
            return False
        logger.debug("Cancelling task %r", identifier)
        entry.handle.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel and clear every entry.

        Returns:
            Number of handles cancelled.
        """
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()

        for entry in entries:
            entry.handle.cancel()
        if entries:
            logger.debug("Cancelled %d active task(s)", len(entries))
        return len(entries)

    def complete(self, token: TaskToken) -> bool:
        """Remove the entry for a finished operation.

        The entry is only removed when ``token`` is still the current
        registration for its identifier.

        Returns:
            True if ``token`` was current, False if it had been replaced or
            cancelled (its completion is stale).
        """
        with self._lock:
            entry = self._entries.get(token.identifier)
            if entry is None or entry.token != token:
                return False
            del self._entries[token.identifier]
            return True

    def is_current(self, token: TaskToken) -> bool:
        """Return whether token still owns its identifier."""
        with self._lock:
            entry = self._entries.get(token.identifier)
            return entry is not None and entry.token == token

    def identifiers(self) -> list[str]:
        """Return the registered identifiers."""
        with self._lock:
            return list(self._entries)

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
