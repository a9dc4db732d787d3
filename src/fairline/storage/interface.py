# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Abstract base class that every chain storage backend must implement.

Implementations must guarantee append-only semantics: records written through
``insert_record`` must never be altered or deleted by the storage layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fairline.types import IncidentRecord, RecordFilter, SortOrder, TimeWindow


class ChainStorage(ABC):
    """
    Contract for incident record persistence backends.

    Backends own every persisted record.  Writers and verifiers keep no chain
    state of their own, so any number of them can share one backend.
    """

    @abstractmethod
    async def insert_record(self, record: IncidentRecord) -> str:
        """
        Atomically persist ``record`` as the new tail of its reporter's chain.

        The insert is a compare-and-set on the tail: it succeeds only when
        ``record.previous_hash`` equals the ``self_hash`` of the reporter's
        current tail (both None for an empty chain).  Otherwise nothing is
        written and ``ConcurrentAppendConflictError`` is raised.

        Returns the id of the persisted record.
        """
        ...

    @abstractmethod
    async def query_by_reporter(
        self,
        reporter_id: str,
        order: SortOrder = "asc",
        limit: int | None = None,
    ) -> list[IncidentRecord]:
        """
        Return one reporter's records in insertion order (``"asc"``) or
        newest first (``"desc"``), optionally truncated to ``limit``.
        """
        ...

    @abstractmethod
    async def query_all(
        self,
        record_filter: RecordFilter | None = None,
        time_window: TimeWindow | None = None,
    ) -> list[IncidentRecord]:
        """
        Return records from every reporter that match the filter and window.

        No ordering is guaranteed.
        """
        ...

    @abstractmethod
    async def find_by_hash(self, self_hash: str) -> IncidentRecord | None:
        """Return the record whose ``self_hash`` equals the argument, if any."""
        ...

    @abstractmethod
    async def find_by_code(self, verification_code: str) -> IncidentRecord | None:
        """
        Return the first record, in storage order, whose upper-case
        ``verification_code`` equals the argument, if any.
        """
        ...

    @abstractmethod
    async def count(self) -> int:
        """Return the total number of records in the store."""
        ...


def select_records(
    records: list[IncidentRecord],
    record_filter: RecordFilter | None,
    time_window: TimeWindow | None,
) -> list[IncidentRecord]:
    """Apply an optional filter and time window; returns a new list."""
    results: list[IncidentRecord] = list(records)

    if record_filter is not None:
        results = [r for r in results if record_filter.matches(r)]

    if time_window is not None:
        results = [r for r in results if time_window.contains(r.timestamp_millis)]

    return results


def order_records(
    records: list[IncidentRecord],
    order: SortOrder,
    limit: int | None,
) -> list[IncidentRecord]:
    """Order an insertion-ordered chain and apply an optional limit."""
    results = list(records) if order == "asc" else list(reversed(records))
    if limit is not None:
        results = results[:limit]
    return results
