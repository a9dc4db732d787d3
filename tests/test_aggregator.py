# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
"""Tests for anonymized aggregation."""

from __future__ import annotations

import asyncio
import random

import pytest

from fairline.aggregator import Aggregator, aggregate_records
from fairline.record import build_incident_record
from fairline.storage.memory import MemoryStorage
from fairline.types import (
    MILLIS_PER_DAY,
    ByOffice,
    BySeverity,
    ByTimeBucket,
    IncidentRecord,
    RecordFilter,
    TimeWindow,
)
from fairline.writer import ChainWriter

from helpers import BASE_TIME_MILLIS, StepClock, make_payload


def _records() -> list[IncidentRecord]:
    rows = [
        ("R1", "Land Registry", "high", 1_000, 0),
        ("R1", "Land Registry", "low", None, 1),
        ("R2", "Passport Office", "high", 500, 2),
        ("R3", "Passport Office", "medium", 250, MILLIS_PER_DAY),
        ("R3", "Traffic Police", "high", 4_000, MILLIS_PER_DAY + 5),
    ]
    return [
        build_incident_record(
            reporter,
            make_payload(office=office, severity=severity, amount_minor=amount),
            previous_hash=None,
            timestamp_millis=BASE_TIME_MILLIS + offset,
        )
        for reporter, office, severity, amount, offset in rows
    ]


class TestAggregateRecords:
    def test_totals_treat_missing_amount_as_zero(self) -> None:
        result = aggregate_records(_records())
        assert result.total_count == 5
        assert result.total_amount_minor == 5_750

    def test_buckets_by_office_and_severity(self) -> None:
        result = aggregate_records(_records(), [ByOffice(), BySeverity()])
        assert result.bucket_totals("office") == {
            "Land Registry": (2, 1_000),
            "Passport Office": (2, 750),
            "Traffic Police": (1, 4_000),
        }
        assert result.bucket_totals("severity") == {
            "high": (3, 5_500),
            "low": (1, 0),
            "medium": (1, 250),
        }

    def test_time_buckets_are_keyed_by_bucket_start(self) -> None:
        result = aggregate_records(_records(), [ByTimeBucket(width_millis=MILLIS_PER_DAY)])
        totals = result.bucket_totals("time_bucket")
        assert sum(count for count, _ in totals.values()) == 5
        for key in totals:
            assert int(key) % MILLIS_PER_DAY == 0

    def test_order_independent(self) -> None:
        records = _records()
        expected = aggregate_records(records, [ByOffice(), BySeverity(), ByTimeBucket()])
        for seed in range(5):
            shuffled = list(records)
            random.Random(seed).shuffle(shuffled)
            result = aggregate_records(shuffled, [ByOffice(), BySeverity(), ByTimeBucket()])
            assert result.total_count == expected.total_count
            assert result.total_amount_minor == expected.total_amount_minor
            for dimension in ("office", "severity", "time_bucket"):
                assert result.bucket_totals(dimension) == expected.bucket_totals(dimension)

    def test_output_never_contains_reporter_ids(self) -> None:
        result = aggregate_records(_records(), [ByOffice(), BySeverity(), ByTimeBucket()])
        serialised = result.model_dump_json()
        assert "reporter_id" not in serialised
        for reporter in ("R1", "R2", "R3"):
            assert f'"{reporter}"' not in serialised

    def test_empty_input(self) -> None:
        result = aggregate_records([])
        assert result.total_count == 0
        assert result.total_amount_minor == 0
        assert result.buckets == {"severity": [], "office": []}

    def test_duplicate_dimension_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="grouped once"):
            aggregate_records(_records(), [ByTimeBucket(), ByTimeBucket(width_millis=60_000)])


class TestAggregator:
    def _storage(self) -> MemoryStorage:
        storage = MemoryStorage()
        writer = ChainWriter(storage, clock=StepClock())

        async def run() -> None:
            await writer.append("R1", make_payload(severity="high", amount_minor=1_000))
            await writer.append("R1", make_payload(severity="low", amount_minor=None))
            await writer.append("R2", make_payload(office="Land Registry", severity="high"))

        asyncio.run(run())
        return storage

    def test_filter_by_severity_counts_across_reporters(self) -> None:
        aggregator = Aggregator(self._storage())
        result = asyncio.run(aggregator.aggregate(RecordFilter(severity="high")))
        assert result.total_count == 2
        assert result.bucket_totals("severity") == {"high": (2, 51_000)}

    def test_filter_by_office(self) -> None:
        aggregator = Aggregator(self._storage())
        result = asyncio.run(aggregator.aggregate(RecordFilter(office="Land Registry")))
        assert result.total_count == 1

    def test_time_window_is_half_open(self) -> None:
        aggregator = Aggregator(self._storage())
        # StepClock stamps the three appends at BASE, BASE+1000, BASE+2000.
        window = TimeWindow(start_millis=BASE_TIME_MILLIS + 1_000, end_millis=BASE_TIME_MILLIS + 2_000)
        result = asyncio.run(aggregator.aggregate(time_window=window))
        assert result.total_count == 1
        assert result.bucket_totals("severity") == {"low": (1, 0)}

    def test_summarize_last_30_days_excludes_older_records(self) -> None:
        storage = self._storage()
        now = BASE_TIME_MILLIS + 31 * MILLIS_PER_DAY
        later_writer = ChainWriter(storage, clock=lambda: now)
        asyncio.run(later_writer.append("R3", make_payload(severity="medium", amount_minor=10)))

        aggregator = Aggregator(storage, clock=lambda: now)
        recent = asyncio.run(aggregator.summarize("last_30_days"))
        everything = asyncio.run(aggregator.summarize())

        assert recent.total_count == 1
        assert recent.total_amount_minor == 10
        assert everything.total_count == 4
        assert set(everything.buckets) == {"severity", "office"}
