# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

from .interface import ChainStorage
from .memory import MemoryStorage
from .file import FileStorage

__all__ = ["ChainStorage", "MemoryStorage", "FileStorage"]
