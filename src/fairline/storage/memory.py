# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Volatile in-memory storage backend.

Each reporter's chain is held in a plain list in insertion order.  Suitable
for testing, short-lived processes, and scenarios where persistence is not
required.  Data is lost when the process exits.
"""

from __future__ import annotations

from fairline.errors import ConcurrentAppendConflictError
from fairline.storage.interface import ChainStorage, order_records, select_records
from fairline.types import IncidentRecord, RecordFilter, SortOrder, TimeWindow


class MemoryStorage(ChainStorage):
    """In-memory, non-persistent ChainStorage implementation."""

    def __init__(self) -> None:
        self._chains: dict[str, list[IncidentRecord]] = {}

    async def insert_record(self, record: IncidentRecord) -> str:
        # No await between the tail check and the append: the compare-and-set
        # cannot interleave with another coroutine.
        chain = self._chains.setdefault(record.reporter_id, [])
        tail_hash = chain[-1].self_hash if chain else None
        if record.previous_hash != tail_hash:
            raise ConcurrentAppendConflictError(
                reporter_id=record.reporter_id,
                expected_previous_hash=record.previous_hash,
                actual_tail_hash=tail_hash,
            )
        chain.append(record)
        return record.id

    async def query_by_reporter(
        self,
        reporter_id: str,
        order: SortOrder = "asc",
        limit: int | None = None,
    ) -> list[IncidentRecord]:
        return order_records(self._chains.get(reporter_id, []), order, limit)

    async def query_all(
        self,
        record_filter: RecordFilter | None = None,
        time_window: TimeWindow | None = None,
    ) -> list[IncidentRecord]:
        records = [record for chain in self._chains.values() for record in chain]
        return select_records(records, record_filter, time_window)

    async def find_by_hash(self, self_hash: str) -> IncidentRecord | None:
        for chain in self._chains.values():
            for record in chain:
                if record.self_hash == self_hash:
                    return record
        return None

    async def find_by_code(self, verification_code: str) -> IncidentRecord | None:
        for chain in self._chains.values():
            for record in chain:
                if record.verification_code == verification_code:
                    return record
        return None

    async def count(self) -> int:
        return sum(len(chain) for chain in self._chains.values())
