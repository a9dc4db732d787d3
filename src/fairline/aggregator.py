# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Anonymized aggregation over incident records from every reporter.

Produces counts and amount sums grouped by a fixed set of dimensions: office,
severity, or fixed-width time bucket.  Aggregation reads the store without
regard to chain order or chain integrity, and is independent of the order in
which records arrive.

The output contains only grouping keys, counts and sums.  Reporter ids never
appear in it: the aggregate view is the one shown to people who do not own
the chains.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Iterable, Sequence

from fairline.record import current_timestamp_millis
from fairline.storage.interface import ChainStorage
from fairline.types import (
    AggregateBucket,
    AggregateResult,
    ByOffice,
    BySeverity,
    GroupBy,
    IncidentRecord,
    RecordFilter,
    TimeRange,
    TimeWindow,
)

DEFAULT_GROUP_BY: tuple[GroupBy, ...] = (BySeverity(), ByOffice())


def _bucket_key(record: IncidentRecord, group_by: GroupBy) -> str:
    if isinstance(group_by, ByOffice):
        return record.office
    if isinstance(group_by, BySeverity):
        return record.severity
    width = group_by.width_millis
    return str(record.timestamp_millis // width * width)


def aggregate_records(
    records: Iterable[IncidentRecord],
    group_by: Sequence[GroupBy] = DEFAULT_GROUP_BY,
) -> AggregateResult:
    """
    Aggregate ``records`` into totals plus one bucket list per dimension.

    A missing ``amount_minor`` counts as zero.  Time buckets are keyed by
    the bucket's start in epoch milliseconds, as a string.

    Raises ``ValueError`` when two selectors share a dimension.
    """
    kinds = [selector.kind for selector in group_by]
    if len(set(kinds)) != len(kinds):
        raise ValueError(f"Each dimension may be grouped once, got {kinds}.")

    total_count = 0
    total_amount = 0
    counts: dict[str, defaultdict[str, int]] = {kind: defaultdict(int) for kind in kinds}
    amounts: dict[str, defaultdict[str, int]] = {kind: defaultdict(int) for kind in kinds}

    for record in records:
        amount = record.amount_minor or 0
        total_count += 1
        total_amount += amount
        for selector in group_by:
            key = _bucket_key(record, selector)
            counts[selector.kind][key] += 1
            amounts[selector.kind][key] += amount

    return AggregateResult(
        total_count=total_count,
        total_amount_minor=total_amount,
        buckets={
            kind: [
                AggregateBucket(key=key, count=count, total_amount_minor=amounts[kind][key])
                for key, count in counts[kind].items()
            ]
            for kind in kinds
        },
    )


class Aggregator:
    """
    Aggregation read path over a storage backend.

    Parameters
    ----------
    storage:
        Backend that owns the chains.
    clock:
        Returns the current time in epoch milliseconds; used by ``summarize``.
    """

    def __init__(
        self,
        storage: ChainStorage,
        clock: Callable[[], int] = current_timestamp_millis,
    ) -> None:
        self._storage = storage
        self._clock = clock

    async def aggregate(
        self,
        record_filter: RecordFilter | None = None,
        time_window: TimeWindow | None = None,
        group_by: Sequence[GroupBy] = DEFAULT_GROUP_BY,
    ) -> AggregateResult:
        """
        Aggregate every record matching ``record_filter`` inside ``time_window``.

        ``None`` for either argument means no restriction.  Bucket order is
        unspecified; callers sort for display.
        """
        records = await self._storage.query_all(record_filter, time_window)
        return aggregate_records(records, group_by)

    async def summarize(self, time_range: TimeRange = "all_time") -> AggregateResult:
        """
        Headline statistics: totals plus buckets by severity and by office.

        ``"last_30_days"`` restricts to the thirty days before now.
        """
        time_window: TimeWindow | None = None
        if time_range == "last_30_days":
            time_window = TimeWindow.last_days(30, self._clock())
        return await self.aggregate(time_window=time_window)

