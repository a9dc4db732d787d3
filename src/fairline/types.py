# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Shared type definitions for the fairline package.

All record models are frozen Pydantic v2 models: fields cannot be mutated
after construction, which mirrors the append-only guarantee of the chain.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

Severity = Literal["low", "medium", "high"]

HashAlgorithm = Literal["sha256", "legacy32"]

SortOrder = Literal["asc", "desc"]

TimeRange = Literal["all_time", "last_30_days"]

ExportFormat = Literal["json", "csv"]

IntegrityStatus = Literal["VERIFIED", "CORRUPTED"]

MILLIS_PER_DAY: int = 24 * 60 * 60 * 1000

VERIFICATION_CODE_LENGTH: int = 8


def verification_code_for(self_hash: str) -> str:
    """Short public code for a record: the first hash characters, upper-cased."""
    return self_hash[:VERIFICATION_CODE_LENGTH].upper()


class GeoLocation(BaseModel):
    """Where the incident happened."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    address: str | None = None
    ward: str | None = None
    district: str | None = None


class IncidentPayload(BaseModel):
    """
    Caller-supplied content of a single incident report.

    Integrity fields and the timestamp are absent; the ChainWriter assigns
    them at write time.
    """

    model_config = ConfigDict(frozen=True)

    office: str
    service: str
    severity: Severity
    amount_minor: int | None = None
    currency: str | None = None
    note: str | None = None
    location: GeoLocation | None = None


class IncidentRecord(BaseModel):
    """
    An immutable, hash-chained record of one reported incident.

    ``self_hash`` commits to every payload field, ``timestamp_millis`` and
    ``previous_hash``.  ``previous_hash`` is None only for the first record in
    a reporter's chain.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    reporter_id: str
    office: str
    service: str
    severity: Severity
    timestamp_millis: int
    amount_minor: int | None = None
    currency: str | None = None
    note: str | None = None
    location: GeoLocation | None = None
    previous_hash: str | None = None
    self_hash: str

    @property
    def verification_code(self) -> str:
        return verification_code_for(self.self_hash)


class AnonymizedIncident(BaseModel):
    """
    The view of an IncidentRecord that may be shown to anyone.

    ``reporter_id`` and the free-text note are deliberately absent.  The
    short ``verification_code`` is included in dumps so exports carry it.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    office: str
    service: str
    severity: Severity
    timestamp_millis: int
    amount_minor: int | None = None
    currency: str | None = None
    location: GeoLocation | None = None
    self_hash: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def verification_code(self) -> str:
        return verification_code_for(self.self_hash)

    @classmethod
    def from_record(cls, record: IncidentRecord) -> AnonymizedIncident:
        return cls(
            id=record.id,
            office=record.office,
            service=record.service,
            severity=record.severity,
            timestamp_millis=record.timestamp_millis,
            amount_minor=record.amount_minor,
            currency=record.currency,
            location=record.location,
            self_hash=record.self_hash,
        )


class RecordFilter(BaseModel):
    """
    Filter parameters for cross-reporter queries.

    All fields are optional.  Omitting a field means no restriction on that
    dimension.
    """

    model_config = ConfigDict(frozen=True)

    office: str | None = None
    severity: Severity | None = None

    def matches(self, record: IncidentRecord) -> bool:
        if self.office is not None and record.office != self.office:
            return False
        if self.severity is not None and record.severity != self.severity:
            return False
        return True


class TimeWindow(BaseModel):
    """
    Half-open time window in epoch milliseconds: ``[start_millis, end_millis)``.

    A missing bound is unbounded on that side.
    """

    model_config = ConfigDict(frozen=True)

    start_millis: int | None = None
    end_millis: int | None = None

    def contains(self, timestamp_millis: int) -> bool:
        if self.start_millis is not None and timestamp_millis < self.start_millis:
            return False
        if self.end_millis is not None and timestamp_millis >= self.end_millis:
            return False
        return True

    @classmethod
    def last_days(cls, days: int, now_millis: int) -> TimeWindow:
        """Window covering the ``days`` days up to and including ``now_millis``."""
        return cls(start_millis=now_millis - days * MILLIS_PER_DAY)


# ---------------------------------------------------------------------------
# Verification results
# ---------------------------------------------------------------------------


class ChainVerificationSuccess(BaseModel):
    """Returned by chain verification when every record link is intact."""

    model_config = ConfigDict(frozen=True)

    is_valid: Literal[True] = True
    record_count: int
    broken_at_index: None = None


class ChainVerificationFailure(BaseModel):
    """Returned by chain verification when a broken link is detected."""

    model_config = ConfigDict(frozen=True)

    is_valid: Literal[False] = False
    record_count: int
    broken_at_index: int
    reason: str


ChainVerificationResult = Union[ChainVerificationSuccess, ChainVerificationFailure]


class AnnotatedRecord(BaseModel):
    """A record paired with whether the chain verifies up to and including it."""

    model_config = ConfigDict(frozen=True)

    index: int
    record: IncidentRecord
    verified: bool


class ChainAudit(BaseModel):
    """Verification result plus every record of the chain, flagged."""

    model_config = ConfigDict(frozen=True)

    result: ChainVerificationResult
    records: list[AnnotatedRecord]


class ReceiptVerification(BaseModel):
    """
    Public answer to "does a record with this hash exist and does it verify?".

    Carries only the anonymized view of the record.
    """

    model_config = ConfigDict(frozen=True)

    found: bool
    verified: bool = False
    incident: AnonymizedIncident | None = None


class ChainStats(BaseModel):
    """
    Summary of one reporter's chain.

    ``average_interval_millis`` is the mean gap between consecutive records,
    rounded to whole milliseconds; it is 0 for a single-record chain.
    """

    model_config = ConfigDict(frozen=True)

    total_records: int = Field(..., ge=1)
    first_timestamp_millis: int
    last_timestamp_millis: int
    average_interval_millis: int = Field(..., ge=0)
    integrity_status: IntegrityStatus
    broken_at_index: int | None = None


def integrity_status_of(result: ChainVerificationResult) -> IntegrityStatus:
    return "VERIFIED" if result.is_valid else "CORRUPTED"


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


class ByOffice(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["office"] = "office"


class BySeverity(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["severity"] = "severity"


class ByTimeBucket(BaseModel):
    """Group into consecutive fixed-width windows aligned to the epoch."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["time_bucket"] = "time_bucket"
    width_millis: int = Field(default=MILLIS_PER_DAY, gt=0)


GroupBy = Annotated[
    Union[ByOffice, BySeverity, ByTimeBucket],
    Field(discriminator="kind"),
]


class AggregateBucket(BaseModel):
    """Count and amount sum for one grouping key."""

    model_config = ConfigDict(frozen=True)

    key: str
    count: int = Field(..., ge=0)
    total_amount_minor: int = 0


class AggregateResult(BaseModel):
    """
    Anonymized aggregate over a set of incident records.

    ``buckets`` maps a dimension name (``"office"``, ``"severity"``,
    ``"time_bucket"``) to its buckets.  Bucket order carries no meaning.
    """

    model_config = ConfigDict(frozen=True)

    total_count: int = Field(..., ge=0)
    total_amount_minor: int = 0
    buckets: dict[str, list[AggregateBucket]] = Field(default_factory=dict)

    def bucket_totals(self, dimension: str) -> dict[str, tuple[int, int]]:
        """Return ``{key: (count, total_amount_minor)}`` for one dimension."""
        return {
            bucket.key: (bucket.count, bucket.total_amount_minor)
            for bucket in self.buckets.get(dimension, [])
        }
