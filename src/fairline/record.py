# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Helpers for constructing IncidentRecord instances.

The timestamp and id are assigned here, at write time, rather than taken
from the caller: a client-supplied timestamp feeds the hash and the chain
order, so it must not be forgeable.
"""

from __future__ import annotations

import time
import uuid

from fairline.hashing import compute_record_hash
from fairline.types import HashAlgorithm, IncidentPayload, IncidentRecord


def _generate_id() -> str:
    """Return a new UUID v4 string."""
    return str(uuid.uuid4())


def current_timestamp_millis() -> int:
    """Return the current UTC time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def build_incident_record(
    reporter_id: str,
    payload: IncidentPayload,
    previous_hash: str | None,
    timestamp_millis: int,
    algorithm: HashAlgorithm = "sha256",
    record_id: str | None = None,
) -> IncidentRecord:
    """
    Hash ``payload`` against ``previous_hash`` and return the finished record.

    Parameters
    ----------
    reporter_id:
        Opaque identity of the chain owner.
    payload:
        Validated incident content.
    previous_hash:
        ``self_hash`` of the reporter's current tail, or None for the first
        record.
    timestamp_millis:
        Server-assigned write time.
    record_id:
        Override the auto-generated UUID (useful in tests for determinism).
    """
    self_hash = compute_record_hash(payload, timestamp_millis, previous_hash, algorithm)
    return IncidentRecord(
        id=record_id or _generate_id(),
        reporter_id=reporter_id,
        office=payload.office,
        service=payload.service,
        severity=payload.severity,
        timestamp_millis=timestamp_millis,
        amount_minor=payload.amount_minor,
        currency=payload.currency,
        note=payload.note,
        location=payload.location,
        previous_hash=previous_hash,
        self_hash=self_hash,
    )
