# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations


class FairlineError(Exception):
    """Base class for all fairline errors."""

    def __init__(self, message: str, code: str = "FAIRLINE_ERROR") -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ReporterNotFoundError(FairlineError):
    """Raised when a reporter has no records in the store."""

    def __init__(self, reporter_id: str) -> None:
        super().__init__(
            "No incident records exist for the requested reporter.",
            code="REPORTER_NOT_FOUND",
        )
        self.reporter_id = reporter_id


class ConcurrentAppendConflictError(FairlineError):
    """
    Raised by a storage backend when an insert does not extend the
    reporter's current tail.

    Attributes:
        reporter_id: The reporter whose chain was being extended.
        expected_previous_hash: The tail hash the writer read.
        actual_tail_hash: The tail hash found in the store at insert time.
    """

    def __init__(
        self,
        reporter_id: str,
        expected_previous_hash: str | None,
        actual_tail_hash: str | None,
    ) -> None:
        super().__init__(
            f"Chain tail moved during append: expected previous hash "
            f"{_short(expected_previous_hash)} but tail is {_short(actual_tail_hash)}.",
            code="CONCURRENT_APPEND_CONFLICT",
        )
        self.reporter_id = reporter_id
        self.expected_previous_hash = expected_previous_hash
        self.actual_tail_hash = actual_tail_hash


class StorageUnavailableError(FairlineError):
    """Raised when the storage backend cannot be read or written."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="STORAGE_UNAVAILABLE")


def _short(value: str | None) -> str:
    if value is None:
        return "<none>"
    return value[:16]
