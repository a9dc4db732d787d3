# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Append-only file storage backend.

Records are stored one JSON object per line (NDJSON / JSON Lines format).
The file is only ever opened for appending or reading, never truncated or
rewritten.  Callers relying on immutability should secure the file with
OS-level permissions.

Reading always parses the entire file from disk so that the in-process view
stays consistent with anything written by other processes.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from pathlib import Path

import aiofiles
from pydantic import ValidationError

from fairline.errors import ConcurrentAppendConflictError, StorageUnavailableError
from fairline.storage.interface import ChainStorage, order_records, select_records
from fairline.types import IncidentRecord, RecordFilter, SortOrder, TimeWindow

logger = logging.getLogger("fairline.storage")


class FileStorage(ChainStorage):
    """
    Persistent, append-only NDJSON file storage backend.

    Appends for one reporter are serialised by a per-reporter lock held
    across the tail read and the line write; appends for different reporters
    never wait on each other.  The lock is per instance, so one file should
    be written through one FileStorage.

    Parameters
    ----------
    file_path:
        Path to the NDJSON file.  The file is created on first append.
    """

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def file_path(self) -> Path:
        return self._file_path

    async def insert_record(self, record: IncidentRecord) -> str:
        async with self._locks[record.reporter_id]:
            chain = await self._read_chain(record.reporter_id)
            tail_hash = chain[-1].self_hash if chain else None
            if record.previous_hash != tail_hash:
                raise ConcurrentAppendConflictError(
                    reporter_id=record.reporter_id,
                    expected_previous_hash=record.previous_hash,
                    actual_tail_hash=tail_hash,
                )

            # A single write call per record keeps lines whole under O_APPEND.
            line = record.model_dump_json() + "\n"
            try:
                async with aiofiles.open(self._file_path, mode="a", encoding="utf-8") as file_handle:
                    await file_handle.write(line)
            except OSError as exc:
                raise StorageUnavailableError(
                    f"Cannot append to {self._file_path}: {exc}"
                ) from exc
        return record.id

    async def query_by_reporter(
        self,
        reporter_id: str,
        order: SortOrder = "asc",
        limit: int | None = None,
    ) -> list[IncidentRecord]:
        return order_records(await self._read_chain(reporter_id), order, limit)

    async def query_all(
        self,
        record_filter: RecordFilter | None = None,
        time_window: TimeWindow | None = None,
    ) -> list[IncidentRecord]:
        return select_records(await self._read_all(), record_filter, time_window)

    async def find_by_hash(self, self_hash: str) -> IncidentRecord | None:
        for record in await self._read_all():
            if record.self_hash == self_hash:
                return record
        return None

    async def find_by_code(self, verification_code: str) -> IncidentRecord | None:
        for record in await self._read_all():
            if record.verification_code == verification_code:
                return record
        return None

    async def count(self) -> int:
        return len(await self._read_all())

    async def _read_chain(self, reporter_id: str) -> list[IncidentRecord]:
        return [r for r in await self._read_all() if r.reporter_id == reporter_id]

    async def _read_all(self) -> list[IncidentRecord]:
        if not self._file_path.exists():
            return []

        records: list[IncidentRecord] = []
        try:
            # Decoded per line: an undecodable line is skipped like a malformed one.
            async with aiofiles.open(self._file_path, mode="rb") as file_handle:
                line_number = 0
                async for raw_line in file_handle:
                    line_number += 1
                    try:
                        stripped = raw_line.decode("utf-8").strip()
                        if not stripped:
                            continue
                        records.append(IncidentRecord.model_validate_json(stripped))
                    except (UnicodeDecodeError, ValidationError):
                        # The chain verifier reports the gap a skipped line leaves.
                        logger.warning(
                            "Skipping malformed record at %s:%d", self._file_path, line_number
                        )
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot read {self._file_path}: {exc}") from exc

        return records
