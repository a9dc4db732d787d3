# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

from fairline.types import HashAlgorithm


class ChainConfig(BaseModel, frozen=True):
    """
    Configuration for chain writing and verification.

    Attributes:
        hash_algorithm: Digest used for ``self_hash``.  ``"legacy32"`` exists
            only to verify chains exported from the legacy checksum scheme.
        max_append_attempts: Total attempts an append makes when the store
            reports a concurrent tail change.  The default allows one retry.
    """

    hash_algorithm: HashAlgorithm = "sha256"
    max_append_attempts: Annotated[int, Field(ge=1)] = 2


class QueryConfig(BaseModel, frozen=True):
    """
    Configuration for list queries.

    Attributes:
        default_limit: Number of records returned when the caller gives no limit.
    """

    default_limit: Annotated[int, Field(gt=0)] = 50


class FairlineConfig(BaseModel, frozen=True):
    """
    Top-level configuration for IncidentLog.

    Example::

        config = FairlineConfig(
            chain=ChainConfig(max_append_attempts=3),
            query=QueryConfig(default_limit=100),
        )
        log = IncidentLog(storage=FileStorage("incidents.ndjson"), config=config)
    """

    chain: ChainConfig = Field(default_factory=ChainConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
