# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
ChainWriter — appends incident records to a reporter's hash chain.

The writer holds no chain state.  Every append reads the reporter's tail
from storage, hashes the new record against it, and asks the store to insert
it as a compare-and-set on that tail.  If another append got there first the
store refuses the insert, and the writer re-reads the tail and tries again
up to ``ChainConfig.max_append_attempts`` times in total.
"""

from __future__ import annotations

import logging
from typing import Callable

from fairline.config import ChainConfig
from fairline.errors import ConcurrentAppendConflictError
from fairline.record import build_incident_record, current_timestamp_millis
from fairline.storage.interface import ChainStorage
from fairline.types import IncidentPayload, IncidentRecord

logger = logging.getLogger("fairline.writer")


class ChainWriter:
    """
    Write path of the incident log.

    Parameters
    ----------
    storage:
        Backend that owns the chains.
    config:
        Hash algorithm and retry budget.
    clock:
        Returns the current time in epoch milliseconds.  Injectable for tests.
    """

    def __init__(
        self,
        storage: ChainStorage,
        config: ChainConfig | None = None,
        clock: Callable[[], int] = current_timestamp_millis,
    ) -> None:
        self._storage = storage
        self._config = config or ChainConfig()
        self._clock = clock

    async def append(self, reporter_id: str, payload: IncidentPayload) -> IncidentRecord:
        """
        Append ``payload`` as the new tail of ``reporter_id``'s chain.

        Returns the persisted record.

        Raises
        ------
        ConcurrentAppendConflictError
            When the tail kept moving for every permitted attempt.
        StorageUnavailableError
            Propagated unchanged from the backend; never retried here.
        """
        attempts = self._config.max_append_attempts
        for attempt in range(1, attempts):
            try:
                return await self._append_once(reporter_id, payload)
            except ConcurrentAppendConflictError:
                logger.info(
                    "Chain tail moved during append, retrying with fresh tail (attempt %d/%d)",
                    attempt + 1,
                    attempts,
                )

        try:
            return await self._append_once(reporter_id, payload)
        except ConcurrentAppendConflictError:
            logger.warning("Append abandoned after %d conflicting attempts", attempts)
            raise

    async def _append_once(self, reporter_id: str, payload: IncidentPayload) -> IncidentRecord:
        """Read the tail, hash against it and attempt one compare-and-set insert."""
        tail = await self._storage.query_by_reporter(reporter_id, order="desc", limit=1)
        previous_hash = tail[0].self_hash if tail else None

        record = build_incident_record(
            reporter_id,
            payload,
            previous_hash,
            timestamp_millis=self._clock(),
            algorithm=self._config.hash_algorithm,
        )
        await self._storage.insert_record(record)

        logger.info(
            "Incident record appended: id=%s first=%s hash=%s...",
            record.id,
            previous_hash is None,
            record.self_hash[:16],
        )
        return record
