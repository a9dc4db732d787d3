# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Export helpers — serialise anonymized incidents to JSON and CSV.

Only ``AnonymizedIncident`` views are written, so an export can never carry
a reporter id or a free-text note.  A chain audit export adds the integrity
status of the chain and a ``verified`` flag on every record.

- JSON: standard JSON array, human-readable with 2-space indentation.
- CSV:  RFC 4180 CSV with a header row; location is flattened into columns.
"""

from __future__ import annotations

import csv
import io
import json
from typing import Any

from fairline.types import (
    AnonymizedIncident,
    ChainAudit,
    ChainVerificationFailure,
    ExportFormat,
    integrity_status_of,
)

# ---------------------------------------------------------------------------
# JSON export
# ---------------------------------------------------------------------------


def export_json(incidents: list[AnonymizedIncident]) -> str:
    """Serialise incidents to a JSON array string with 2-space indentation."""
    return json.dumps(
        [incident.model_dump(mode="json") for incident in incidents],
        indent=2,
        ensure_ascii=False,
    )


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------

CSV_COLUMNS: list[str] = [
    "id",
    "timestamp_millis",
    "office",
    "service",
    "severity",
    "amount_minor",
    "currency",
    "latitude",
    "longitude",
    "address",
    "ward",
    "district",
    "verification_code",
    "self_hash",
]


def _incident_to_csv_row(incident: AnonymizedIncident) -> list[str]:
    raw = incident.model_dump(mode="json")
    location = raw.pop("location", None) or {}
    raw.update(location)
    return ["" if raw.get(column) is None else str(raw[column]) for column in CSV_COLUMNS]


def export_csv(incidents: list[AnonymizedIncident]) -> str:
    """
    Serialise incidents to CSV format.

    The first row contains column headers.  Absent optional values are left
    empty.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for incident in incidents:
        writer.writerow(_incident_to_csv_row(incident))
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


def export_incidents(incidents: list[AnonymizedIncident], export_format: ExportFormat) -> str:
    """
    Serialise ``incidents`` in the requested format (``"json"`` or ``"csv"``).

    Raises ``ValueError`` for an unsupported format.
    """
    if export_format == "json":
        return export_json(incidents)
    if export_format == "csv":
        return export_csv(incidents)
    raise ValueError(
        f'Unsupported export format "{export_format}". Supported formats: json, csv.'
    )


# ---------------------------------------------------------------------------
# Chain audit export
# ---------------------------------------------------------------------------

AUDIT_CSV_COLUMNS: list[str] = ["index", "verified", *CSV_COLUMNS, "previous_hash"]


def _audit_entries(audit: ChainAudit) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    for annotated in audit.records:
        incident = AnonymizedIncident.from_record(annotated.record)
        entries.append(
            {
                "index": annotated.index,
                "verified": annotated.verified,
                **incident.model_dump(mode="json"),
                "previous_hash": annotated.record.previous_hash,
            }
        )
    return entries


def export_chain_audit_json(audit: ChainAudit, exported_at_millis: int) -> str:
    """
    Serialise a chain audit as a JSON object with ``metadata`` and ``records``.

    The metadata carries the integrity status (``VERIFIED`` or ``CORRUPTED``),
    the break position and its reason; every record carries its own
    ``verified`` flag.  Records are anonymized.
    """
    result = audit.result
    document = {
        "metadata": {
            "exported_at_millis": exported_at_millis,
            "record_count": result.record_count,
            "integrity_status": integrity_status_of(result),
            "broken_at_index": result.broken_at_index,
            "reason": result.reason if isinstance(result, ChainVerificationFailure) else None,
        },
        "records": _audit_entries(audit),
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def export_chain_audit_csv(audit: ChainAudit) -> str:
    """
    Serialise a chain audit as CSV, one row per record in chain order.

    ``verified`` is ``true`` or ``false`` on every row, so a broken chain can
    never be read back as valid data.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(AUDIT_CSV_COLUMNS)
    for entry in _audit_entries(audit):
        entry.update(entry.pop("location", None) or {})
        entry["verified"] = "true" if entry["verified"] else "false"
        writer.writerow(
            ["" if entry.get(column) is None else str(entry[column])
             for column in AUDIT_CSV_COLUMNS]
        )
    return buffer.getvalue()


def export_chain_audit(
    audit: ChainAudit,
    export_format: ExportFormat,
    exported_at_millis: int,
) -> str:
    """
    Serialise a chain audit in the requested format (``"json"`` or ``"csv"``).

    Raises ``ValueError`` for an unsupported format.
    """
    if export_format == "json":
        return export_chain_audit_json(audit, exported_at_millis)
    if export_format == "csv":
        return export_chain_audit_csv(audit)
    raise ValueError(
        f'Unsupported export format "{export_format}". Supported formats: json, csv.'
    )
