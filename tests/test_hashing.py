# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
"""Tests for the record hasher."""

from __future__ import annotations

import pytest

from fairline.hashing import compute_record_hash, hash_record
from fairline.record import build_incident_record
from fairline.types import GeoLocation

from helpers import BASE_TIME_MILLIS, make_payload

PREVIOUS = "a" * 64


class TestComputeRecordHash:
    def test_deterministic(self) -> None:
        payload = make_payload()
        h1 = compute_record_hash(payload, BASE_TIME_MILLIS, PREVIOUS)
        h2 = compute_record_hash(payload, BASE_TIME_MILLIS, PREVIOUS)
        assert h1 == h2

    def test_sha256_output_is_64_lowercase_hex(self) -> None:
        digest = compute_record_hash(make_payload(), BASE_TIME_MILLIS, None)
        assert len(digest) == 64
        assert all(c in "0123456789abcdef" for c in digest)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"office": "Land Registry"},
            {"service": "mutation"},
            {"amount_minor": 50_001},
            {"severity": "high"},
            {"currency": "INR"},
            {"note": "asked in cash"},
            {"location": GeoLocation(latitude=23.81, longitude=90.41)},
        ],
    )
    def test_any_payload_field_changes_hash(self, overrides: dict[str, object]) -> None:
        base = compute_record_hash(make_payload(), BASE_TIME_MILLIS, PREVIOUS)
        changed = compute_record_hash(make_payload(**overrides), BASE_TIME_MILLIS, PREVIOUS)
        assert base != changed

    def test_timestamp_changes_hash(self) -> None:
        payload = make_payload()
        assert compute_record_hash(payload, BASE_TIME_MILLIS, PREVIOUS) != compute_record_hash(
            payload, BASE_TIME_MILLIS + 1, PREVIOUS
        )

    def test_previous_hash_changes_hash(self) -> None:
        payload = make_payload()
        assert compute_record_hash(payload, BASE_TIME_MILLIS, "0" * 64) != compute_record_hash(
            payload, BASE_TIME_MILLIS, "1" * 64
        )

    def test_missing_amount_hashes_as_zero(self) -> None:
        missing = compute_record_hash(make_payload(amount_minor=None), BASE_TIME_MILLIS, PREVIOUS)
        zero = compute_record_hash(make_payload(amount_minor=0), BASE_TIME_MILLIS, PREVIOUS)
        assert missing == zero

    def test_absent_previous_hash_hashes_as_empty_string(self) -> None:
        payload = make_payload()
        assert compute_record_hash(payload, BASE_TIME_MILLIS, None) == compute_record_hash(
            payload, BASE_TIME_MILLIS, ""
        )

    def test_field_boundaries_are_unambiguous(self) -> None:
        h1 = compute_record_hash(make_payload(office="a|b", service="c"), BASE_TIME_MILLIS, None)
        h2 = compute_record_hash(make_payload(office="a", service="b|c"), BASE_TIME_MILLIS, None)
        assert h1 != h2

    def test_hash_record_matches_hash_at_build_time(self) -> None:
        record = build_incident_record("R1", make_payload(), PREVIOUS, BASE_TIME_MILLIS)
        assert hash_record(record, PREVIOUS) == record.self_hash


class TestLegacyChecksum:
    def test_known_value(self) -> None:
        # "0||||" -> 48, then four '|' (124) folded with h * 31 + unit.
        payload = make_payload(office="", service="", amount_minor=None)
        assert compute_record_hash(payload, 0, None, algorithm="legacy32") == "2dea730"

    def test_ignores_fields_outside_legacy_scheme(self) -> None:
        h1 = compute_record_hash(make_payload(severity="low"), BASE_TIME_MILLIS, None, "legacy32")
        h2 = compute_record_hash(make_payload(severity="high"), BASE_TIME_MILLIS, None, "legacy32")
        assert h1 == h2

    def test_stays_within_32_bits(self) -> None:
        payload = make_payload(office="x" * 500, service="ঢাকা পাসপোর্ট অফিস")
        digest = compute_record_hash(payload, BASE_TIME_MILLIS, PREVIOUS, algorithm="legacy32")
        assert 1 <= len(digest) <= 8
        assert int(digest, 16) <= 0x80000000

    def test_differs_from_sha256(self) -> None:
        payload = make_payload()
        assert compute_record_hash(payload, BASE_TIME_MILLIS, None, "legacy32") != compute_record_hash(
            payload, BASE_TIME_MILLIS, None, "sha256"
        )
