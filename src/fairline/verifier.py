# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Chain verification for hash-chained incident records.

Replays a reporter's chain oldest-first and re-derives every hash from
scratch.  For each record it checks two things:

1. The stored ``previous_hash`` equals the ``self_hash`` of the record
   before it (None for the first record).
2. The stored ``self_hash`` equals the hash recomputed from the record's
   fields and the expected predecessor.

The first record failing either check breaks the chain from that position
onward.  A broken chain is a result value, not an exception: it is an
expected outcome (possible tampering) that callers must surface as an
integrity warning while still showing the records.

Verification only reads.  It takes no locks and can run alongside appends;
it simply does not see records appended after its read.
"""

from __future__ import annotations

import logging

from fairline.config import ChainConfig
from fairline.errors import ReporterNotFoundError
from fairline.hashing import hash_record
from fairline.storage.interface import ChainStorage
from fairline.types import (
    AnnotatedRecord,
    AnonymizedIncident,
    ChainAudit,
    ChainStats,
    ChainVerificationFailure,
    ChainVerificationResult,
    ChainVerificationSuccess,
    HashAlgorithm,
    IncidentRecord,
    ReceiptVerification,
    integrity_status_of,
)

logger = logging.getLogger("fairline.verifier")


def verify_records(
    records: list[IncidentRecord],
    algorithm: HashAlgorithm = "sha256",
) -> ChainVerificationResult:
    """
    Verify an already-fetched chain given oldest first.

    ``record_count`` is always ``len(records)``, including on failure.  An
    empty list is a valid chain of length zero.
    """
    expected_previous_hash: str | None = None

    for index, record in enumerate(records):
        if record.previous_hash != expected_previous_hash:
            return ChainVerificationFailure(
                record_count=len(records),
                broken_at_index=index,
                reason=(
                    f"Record at index {index} has previous_hash "
                    f'"{record.previous_hash}" but expected '
                    f'"{expected_previous_hash}".'
                ),
            )

        expected_hash = hash_record(record, expected_previous_hash, algorithm)
        if record.self_hash != expected_hash:
            return ChainVerificationFailure(
                record_count=len(records),
                broken_at_index=index,
                reason=(
                    f'Record at index {index} (id="{record.id}") has '
                    f'self_hash "{record.self_hash}" but recomputed '
                    f'hash is "{expected_hash}". '
                    f"Record content may have been altered."
                ),
            )

        expected_previous_hash = record.self_hash

    return ChainVerificationSuccess(record_count=len(records))


def annotate_records(
    records: list[IncidentRecord],
    result: ChainVerificationResult,
) -> list[AnnotatedRecord]:
    """Flag each record as verified or not according to ``result``."""
    broken_at = result.broken_at_index
    return [
        AnnotatedRecord(
            index=index,
            record=record,
            verified=broken_at is None or index < broken_at,
        )
        for index, record in enumerate(records)
    ]


class ChainVerifier:
    """
    Read path that checks reporter chains held by a storage backend.

    Parameters
    ----------
    storage:
        Backend that owns the chains.
    config:
        Supplies the hash algorithm the chains were written with.
    """

    def __init__(self, storage: ChainStorage, config: ChainConfig | None = None) -> None:
        self._storage = storage
        self._config = config or ChainConfig()

    async def verify(self, reporter_id: str) -> ChainVerificationResult:
        """
        Verify the whole chain of ``reporter_id``.

        Raises ``ReporterNotFoundError`` when the store has no records for
        the reporter.
        """
        records = await self._fetch_chain(reporter_id)
        return self._verify_and_log(records)

    async def audit(self, reporter_id: str) -> ChainAudit:
        """
        Verify the chain and return every record flagged as verified or not.

        Records from the break onward are still returned so they can be shown,
        marked as unverified.
        """
        records = await self._fetch_chain(reporter_id)
        result = self._verify_and_log(records)
        return ChainAudit(result=result, records=annotate_records(records, result))

    async def verify_receipt(self, self_hash: str) -> ReceiptVerification:
        """
        Check a record hash handed out as a receipt.

        Answers whether a record with that hash exists and whether its chain
        verifies up to and including it.  Only the anonymized view of the
        record is returned.
        """
        return await self._receipt_for(await self._storage.find_by_hash(self_hash))

    async def verify_code(self, verification_code: str) -> ReceiptVerification:
        """
        Check a short public verification code, as typed in by anyone.

        The code is matched case-insensitively after trimming whitespace.  If
        several records share a code, the first one in storage order answers.
        """
        normalised = verification_code.strip().upper()
        return await self._receipt_for(await self._storage.find_by_code(normalised))

    async def chain_stats(self, reporter_id: str) -> ChainStats:
        """
        Record count, time span, mean append interval and integrity status
        of one reporter's chain.

        Raises ``ReporterNotFoundError`` when the store has no records for
        the reporter.
        """
        records = await self._fetch_chain(reporter_id)
        result = self._verify_and_log(records)

        timestamps = [record.timestamp_millis for record in records]
        first, last = min(timestamps), max(timestamps)
        average_interval = 0
        if len(records) > 1:
            average_interval = round((last - first) / (len(records) - 1))

        return ChainStats(
            total_records=len(records),
            first_timestamp_millis=first,
            last_timestamp_millis=last,
            average_interval_millis=average_interval,
            integrity_status=integrity_status_of(result),
            broken_at_index=result.broken_at_index,
        )

    async def _receipt_for(self, record: IncidentRecord | None) -> ReceiptVerification:
        if record is None:
            return ReceiptVerification(found=False)

        chain = await self._storage.query_by_reporter(record.reporter_id, order="asc")
        position = next(
            (index for index, candidate in enumerate(chain) if candidate.id == record.id),
            None,
        )
        verified = False
        if position is not None:
            prefix = verify_records(chain[: position + 1], self._config.hash_algorithm)
            verified = prefix.is_valid

        return ReceiptVerification(
            found=True,
            verified=verified,
            incident=AnonymizedIncident.from_record(record),
        )

    async def _fetch_chain(self, reporter_id: str) -> list[IncidentRecord]:
        records = await self._storage.query_by_reporter(reporter_id, order="asc")
        if not records:
            raise ReporterNotFoundError(reporter_id)
        return records

    def _verify_and_log(self, records: list[IncidentRecord]) -> ChainVerificationResult:
        result = verify_records(records, self._config.hash_algorithm)
        if isinstance(result, ChainVerificationFailure):
            logger.warning(
                "Chain integrity violation at index %d of %d: %s",
                result.broken_at_index,
                result.record_count,
                result.reason,
            )
        else:
            logger.info("Chain verified: %d records all valid", result.record_count)
        return result
