# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
"""Test doubles and builders shared by the fairline test modules."""

from __future__ import annotations

import asyncio

from fairline.errors import ConcurrentAppendConflictError
from fairline.storage.memory import MemoryStorage
from fairline.types import IncidentPayload, IncidentRecord, SortOrder

BASE_TIME_MILLIS = 1_700_000_000_000


class StepClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: int = BASE_TIME_MILLIS, step: int = 1_000) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        current = self.now
        self.now += self.step
        return current


class RacingStorage(MemoryStorage):
    """
    MemoryStorage that holds the first ``racers`` tail reads until all of
    them have read, so concurrent appends see the same tail.
    """

    def __init__(self, racers: int = 2) -> None:
        super().__init__()
        self._waiting = racers
        self._released = asyncio.Event()
        self.conflicts = 0

    async def query_by_reporter(
        self,
        reporter_id: str,
        order: SortOrder = "asc",
        limit: int | None = None,
    ) -> list[IncidentRecord]:
        records = await super().query_by_reporter(reporter_id, order, limit)
        if self._waiting > 0:
            self._waiting -= 1
            if self._waiting == 0:
                self._released.set()
            else:
                await self._released.wait()
        return records

    async def insert_record(self, record: IncidentRecord) -> str:
        try:
            return await super().insert_record(record)
        except ConcurrentAppendConflictError:
            self.conflicts += 1
            raise


def make_payload(**overrides: object) -> IncidentPayload:
    fields: dict[str, object] = {
        "office": "Passport Office Dhaka",
        "service": "passport_renewal",
        "severity": "medium",
        "amount_minor": 50_000,
        "currency": "BDT",
    }
    fields.update(overrides)
    return IncidentPayload.model_validate(fields)


def tamper(storage: MemoryStorage, reporter_id: str, index: int, **changes: object) -> None:
    """Overwrite a stored record in place, bypassing the append-only API."""
    chain = storage._chains[reporter_id]
    chain[index] = chain[index].model_copy(update=changes)

