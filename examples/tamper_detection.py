# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
tamper_detection.py — Demonstrates the incident log end to end.

Shows how to:
- Append incident reports to two reporters' chains (file-backed)
- Verify a chain, then detect an edit made directly to the file
- List the chain with unverified records flagged
- Print anonymized statistics

Run: python examples/tamper_detection.py
"""

from __future__ import annotations

import asyncio
import json
import sys
import tempfile
from pathlib import Path

# Allow running directly from the examples directory.
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fairline import FileStorage, IncidentLog, IncidentPayload, RecordFilter


async def main() -> None:
    path = Path(tempfile.mkdtemp()) / "incidents.ndjson"
    log = IncidentLog(storage=FileStorage(path))

    print("=== fairline — Tamper Detection Example ===\n")

    reports = [
        ("reporter-a", IncidentPayload(office="Land Registry", service="mutation",
                                       severity="high", amount_minor=1_000, currency="BDT")),
        ("reporter-a", IncidentPayload(office="Land Registry", service="certified_copy",
                                       severity="low", currency="BDT")),
        ("reporter-a", IncidentPayload(office="Passport Office", service="passport_renewal",
                                       severity="medium", amount_minor=500, currency="BDT")),
        ("reporter-b", IncidentPayload(office="Traffic Police", service="license_check",
                                       severity="high", amount_minor=2_000, currency="BDT")),
    ]

    print("Appending reports...")
    for reporter_id, payload in reports:
        record = await log.append(reporter_id, payload)
        print(f"  {payload.office:<16} {payload.severity:<6} | hash: {record.self_hash[:16]}...")

    print(f"\nreporter-a: {await log.verify('reporter-a')}")

    # Rewrite the second line of the file, as someone with disk access might.
    lines = path.read_text(encoding="utf-8").splitlines()
    edited = json.loads(lines[1])
    edited["office"] = "Some Other Office"
    lines[1] = json.dumps(edited)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    print(f"reporter-a after edit: {await log.verify('reporter-a')}")

    print("\n--- reporter-a chain ---")
    audit = await log.audit("reporter-a")
    for entry in audit.records:
        marker = "OK        " if entry.verified else "UNVERIFIED"
        print(f"  [{marker}] #{entry.index} {entry.record.office} / {entry.record.service}")

    stats = await log.chain_stats("reporter-a")
    print(f"  integrity: {stats.integrity_status}, broken at index {stats.broken_at_index}")

    code = audit.records[0].record.verification_code
    receipt = await log.verify_code(code)
    print(f"  public code {code}: found={receipt.found} verified={receipt.verified}")

    print("\n--- Anonymized statistics (high severity) ---")
    summary = await log.aggregate(RecordFilter(severity="high"))
    print(summary.model_dump_json(indent=2))


if __name__ == "__main__":
    asyncio.run(main())
