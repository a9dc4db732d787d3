# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Content hashing for hash-chained incident records.

A record's ``self_hash`` commits to its content, its write timestamp, and the
``self_hash`` of the record before it in the same reporter's chain.  Changing
any of those values, or splicing a record into a different position, changes
the hash and is detected on verification.

The SHA-256 input is a compact JSON array with a fixed field order and never
depends on dict iteration order:

    [timestamp_millis, office, service, amount_or_zero, previous_hash_or_empty,
     severity, currency_or_empty, note_or_empty, location_or_null]

where ``location`` is ``[latitude, longitude, address, ward, district]`` with
missing text parts as ``""``.  A missing amount is hashed as ``0`` and a
missing previous hash as ``""`` so the serialisation is the same on every
platform.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Union

from fairline.types import HashAlgorithm, IncidentPayload, IncidentRecord

HashedContent = Union[IncidentPayload, IncidentRecord]


def _canonicalise(content: HashedContent, timestamp_millis: int, previous_hash: str | None) -> str:
    """
    Produce the deterministic JSON array that the SHA-256 digest covers.

    An array rather than a delimiter-joined string keeps field boundaries
    unambiguous when office or service names contain the delimiter.
    """
    location: list[Any] | None = None
    if content.location is not None:
        location = [
            content.location.latitude,
            content.location.longitude,
            content.location.address or "",
            content.location.ward or "",
            content.location.district or "",
        ]
    return json.dumps(
        [
            timestamp_millis,
            content.office,
            content.service,
            content.amount_minor or 0,
            previous_hash or "",
            content.severity,
            content.currency or "",
            content.note or "",
            location,
        ],
        ensure_ascii=False,
        separators=(",", ":"),
    )


def _legacy_checksum(content: HashedContent, timestamp_millis: int, previous_hash: str | None) -> str:
    """
    32-bit rolling checksum used by chains written before the SHA-256 switch.

    ``h = h * 31 + unit`` over the UTF-16 code units of
    ``"{timestamp}|{office}|{service}|{amount or 0}|{previous or ''}"``,
    wrapped to a signed 32-bit integer; the result is the lowercase hex of its
    absolute value.  Covers only those five fields, collides easily and is
    trivially forgeable: only suitable for re-verifying legacy chains.
    """
    data = (
        f"{timestamp_millis}|{content.office}|{content.service}|"
        f"{content.amount_minor or 0}|{previous_hash or ''}"
    )
    raw = data.encode("utf-16-le")
    value = 0
    for offset in range(0, len(raw), 2):
        code_unit = raw[offset] | (raw[offset + 1] << 8)
        value = ((value << 5) - value + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return format(abs(value), "x")


def compute_record_hash(
    content: HashedContent,
    timestamp_millis: int,
    previous_hash: str | None,
    algorithm: HashAlgorithm = "sha256",
) -> str:
    """
    Compute the ``self_hash`` for a record's content and its predecessor.

    Pure and deterministic.  ``previous_hash`` is None for the first record
    of a chain; a stored record can be passed as ``content`` to recompute its
    hash.
    """
    if algorithm == "legacy32":
        return _legacy_checksum(content, timestamp_millis, previous_hash)
    canonical = _canonicalise(content, timestamp_millis, previous_hash)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def hash_record(
    record: IncidentRecord,
    previous_hash: str | None,
    algorithm: HashAlgorithm = "sha256",
) -> str:
    """Recompute the hash of a stored record against an expected predecessor."""
    return compute_record_hash(record, record.timestamp_millis, previous_hash, algorithm)
