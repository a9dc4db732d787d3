# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
"""Shared fixtures for fairline tests."""

from __future__ import annotations

import pytest

from fairline.incident_log import IncidentLog
from fairline.storage.memory import MemoryStorage

from helpers import StepClock


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def incident_log(storage: MemoryStorage, clock: StepClock) -> IncidentLog:
    """An IncidentLog over fresh in-memory storage with a deterministic clock."""
    return IncidentLog(storage=storage, clock=clock)
