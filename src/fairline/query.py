# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Read-only listing queries over any ChainStorage backend.

Two audiences are served:

- the chain owner, who may see their own full records, and
- everyone else, who only ever receives ``AnonymizedIncident`` views.
"""

from __future__ import annotations

from fairline.config import QueryConfig
from fairline.storage.interface import ChainStorage
from fairline.types import AnonymizedIncident, IncidentRecord, RecordFilter


class IncidentQuery:
    """
    Listing interface over a ChainStorage backend.

    Parameters
    ----------
    storage:
        The storage backend to query.
    config:
        Supplies the default result limit.
    """

    def __init__(self, storage: ChainStorage, config: QueryConfig | None = None) -> None:
        self._storage = storage
        self._config = config or QueryConfig()

    async def find_by_reporter(
        self,
        reporter_id: str,
        limit: int | None = None,
    ) -> list[IncidentRecord]:
        """Return a reporter's own records, newest first."""
        return await self._storage.query_by_reporter(
            reporter_id,
            order="desc",
            limit=self._config.default_limit if limit is None else limit,
        )

    async def find_anonymized(
        self,
        record_filter: RecordFilter | None = None,
        limit: int | None = None,
    ) -> list[AnonymizedIncident]:
        """
        Return anonymized incidents from all reporters, newest first.

        Ties in timestamp fall back to the record id so the listing is stable.
        """
        records = await self._storage.query_all(record_filter)
        records.sort(key=lambda r: (r.timestamp_millis, r.id), reverse=True)
        records = records[: self._config.default_limit if limit is None else limit]
        return [AnonymizedIncident.from_record(record) for record in records]

    async def count(self) -> int:
        """Return the total number of records currently in the store."""
        return await self._storage.count()
