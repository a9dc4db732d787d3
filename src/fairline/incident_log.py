# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
IncidentLog — primary entry point for recording and checking incident reports.

IncidentLog wires the stateless components over one storage backend:

1. ChainWriter — appends records to a reporter's hash chain.
2. ChainVerifier — replays a chain and recomputes every hash.
3. Aggregator — anonymized counts and sums across all reporters.
4. IncidentQuery — owner and anonymized listings.

Usage::

    from fairline import IncidentLog, IncidentPayload

    log = IncidentLog()
    record = await log.append(
        "reporter-1",
        IncidentPayload(office="Land Registry", service="mutation", severity="high",
                        amount_minor=50_000),
    )
    result = await log.verify("reporter-1")
"""

from __future__ import annotations

from typing import Callable, Sequence

from fairline.aggregator import DEFAULT_GROUP_BY, Aggregator
from fairline.config import FairlineConfig
from fairline.export import export_chain_audit, export_incidents
from fairline.query import IncidentQuery
from fairline.record import current_timestamp_millis
from fairline.storage.interface import ChainStorage
from fairline.storage.memory import MemoryStorage
from fairline.types import (
    AggregateResult,
    AnonymizedIncident,
    ChainAudit,
    ChainStats,
    ChainVerificationResult,
    ExportFormat,
    GroupBy,
    IncidentPayload,
    IncidentRecord,
    ReceiptVerification,
    RecordFilter,
    TimeRange,
    TimeWindow,
)
from fairline.verifier import ChainVerifier
from fairline.writer import ChainWriter


class IncidentLog:
    """
    Tamper-evident incident log.

    Holds no chain state of its own; any number of IncidentLog instances
    over the same backend stay consistent.

    Parameters
    ----------
    storage:
        Pluggable storage backend.  Defaults to in-memory storage when omitted.
    config:
        Package configuration.  Defaults apply when omitted.
    clock:
        Returns the current time in epoch milliseconds.  Injectable for tests.
    """

    def __init__(
        self,
        storage: ChainStorage | None = None,
        config: FairlineConfig | None = None,
        clock: Callable[[], int] = current_timestamp_millis,
    ) -> None:
        self._storage: ChainStorage = storage or MemoryStorage()
        self._clock = clock
        self._config = config or FairlineConfig()
        self._writer = ChainWriter(self._storage, self._config.chain, clock=clock)
        self._verifier = ChainVerifier(self._storage, self._config.chain)
        self._aggregator = Aggregator(self._storage, clock=clock)
        self._query = IncidentQuery(self._storage, self._config.query)

    async def append(self, reporter_id: str, payload: IncidentPayload) -> IncidentRecord:
        """Append a report to the reporter's chain and return the stored record."""
        return await self._writer.append(reporter_id, payload)

    async def verify(self, reporter_id: str) -> ChainVerificationResult:
        """Verify the reporter's complete chain."""
        return await self._verifier.verify(reporter_id)

    async def audit(self, reporter_id: str) -> ChainAudit:
        """Verify the reporter's chain and return its records flagged."""
        return await self._verifier.audit(reporter_id)

    async def verify_receipt(self, self_hash: str) -> ReceiptVerification:
        """Check a record hash handed out as a public receipt."""
        return await self._verifier.verify_receipt(self_hash)

    async def verify_code(self, verification_code: str) -> ReceiptVerification:
        """Check a short public verification code."""
        return await self._verifier.verify_code(verification_code)

    async def chain_stats(self, reporter_id: str) -> ChainStats:
        """Record count, time span, mean interval and integrity of one chain."""
        return await self._verifier.chain_stats(reporter_id)

    async def aggregate(
        self,
        record_filter: RecordFilter | None = None,
        time_window: TimeWindow | None = None,
        group_by: Sequence[GroupBy] = DEFAULT_GROUP_BY,
    ) -> AggregateResult:
        """Anonymized counts and sums over matching records."""
        return await self._aggregator.aggregate(record_filter, time_window, group_by)

    async def summarize(self, time_range: TimeRange = "all_time") -> AggregateResult:
        """Headline statistics by severity and office."""
        return await self._aggregator.summarize(time_range)

    async def find_by_reporter(
        self,
        reporter_id: str,
        limit: int | None = None,
    ) -> list[IncidentRecord]:
        """The reporter's own records, newest first."""
        return await self._query.find_by_reporter(reporter_id, limit)

    async def find_anonymized(
        self,
        record_filter: RecordFilter | None = None,
        limit: int | None = None,
    ) -> list[AnonymizedIncident]:
        """Anonymized records from all reporters, newest first."""
        return await self._query.find_anonymized(record_filter, limit)

    async def export(
        self,
        export_format: ExportFormat,
        record_filter: RecordFilter | None = None,
        limit: int | None = None,
    ) -> str:
        """
        Export anonymized incidents.

        Supported formats:

        - ``"json"`` — JSON array of anonymized incidents.
        - ``"csv"``  — RFC 4180 CSV with a header row.
        """
        incidents = await self._query.find_anonymized(record_filter, limit)
        return export_incidents(incidents, export_format)

    async def count(self) -> int:
        """Return the total number of records currently in the store."""
        return await self._query.count()

    async def export_audit(self, reporter_id: str, export_format: ExportFormat = "json") -> str:
        """
        Export one reporter's chain with its integrity status.

        Every record is anonymized and flagged ``verified`` or not, so records
        after a break are exported but never presented as valid.
        """
        audit = await self._verifier.audit(reporter_id)
        return export_chain_audit(audit, export_format, exported_at_millis=self._clock())
