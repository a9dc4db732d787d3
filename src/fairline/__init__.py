# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
fairline — Tamper-evident, hash-chained incident reporting.

Public API surface:

    Classes:
        IncidentLog    — Primary facade: append(), verify(), audit(), chain_stats(),
                         aggregate(), export(), export_audit()
        ChainWriter    — Appends records to a reporter's chain
        ChainVerifier  — Recomputes and checks a reporter's chain
        Aggregator     — Anonymized counts and sums across reporters
        IncidentQuery  — Owner and anonymized listings
        MemoryStorage  — Volatile in-memory storage (default)
        FileStorage    — Append-only NDJSON file storage

    Functions:
        compute_record_hash  — The record hasher
        verify_records       — Chain verification over fetched records
        aggregate_records    — Aggregation over fetched records
        export_json, export_csv, export_incidents, export_chain_audit

    Types:
        IncidentPayload, IncidentRecord, AnonymizedIncident, GeoLocation,
        ChainVerificationResult, ChainVerificationSuccess,
        ChainVerificationFailure, ChainAudit, ChainStats, ReceiptVerification,
        AggregateResult, AggregateBucket, RecordFilter, TimeWindow,
        ByOffice, BySeverity, ByTimeBucket, ChainStorage
"""

from fairline.aggregator import Aggregator, aggregate_records
from fairline.config import ChainConfig, FairlineConfig, QueryConfig
from fairline.errors import (
    ConcurrentAppendConflictError,
    FairlineError,
    ReporterNotFoundError,
    StorageUnavailableError,
)
from fairline.export import (
    export_chain_audit,
    export_csv,
    export_incidents,
    export_json,
)
from fairline.hashing import compute_record_hash
from fairline.incident_log import IncidentLog
from fairline.query import IncidentQuery
from fairline.storage.file import FileStorage
from fairline.storage.interface import ChainStorage
from fairline.storage.memory import MemoryStorage
from fairline.types import (
    AggregateBucket,
    AggregateResult,
    AnnotatedRecord,
    AnonymizedIncident,
    ByOffice,
    BySeverity,
    ByTimeBucket,
    ChainAudit,
    ChainStats,
    ChainVerificationFailure,
    ChainVerificationResult,
    ChainVerificationSuccess,
    GeoLocation,
    IncidentPayload,
    IncidentRecord,
    ReceiptVerification,
    RecordFilter,
    TimeWindow,
)
from fairline.verifier import ChainVerifier, verify_records
from fairline.writer import ChainWriter

__all__ = [
    # Core classes
    "IncidentLog",
    "ChainWriter",
    "ChainVerifier",
    "Aggregator",
    "IncidentQuery",
    # Storage
    "MemoryStorage",
    "FileStorage",
    "ChainStorage",
    # Functions
    "compute_record_hash",
    "verify_records",
    "aggregate_records",
    "export_json",
    "export_csv",
    "export_incidents",
    "export_chain_audit",
    # Config
    "FairlineConfig",
    "ChainConfig",
    "QueryConfig",
    # Errors
    "FairlineError",
    "ReporterNotFoundError",
    "ConcurrentAppendConflictError",
    "StorageUnavailableError",
    # Types
    "IncidentPayload",
    "IncidentRecord",
    "AnonymizedIncident",
    "GeoLocation",
    "ChainVerificationResult",
    "ChainVerificationSuccess",
    "ChainVerificationFailure",
    "ChainAudit",
    "AnnotatedRecord",
    "ChainStats",
    "ReceiptVerification",
    "AggregateResult",
    "AggregateBucket",
    "RecordFilter",
    "TimeWindow",
    "ByOffice",
    "BySeverity",
    "ByTimeBucket",
]
