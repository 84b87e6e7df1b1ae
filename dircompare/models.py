from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping


class Status(str, Enum):
    MISSING_IN_A = "MissingInA"
    MISSING_IN_B = "MissingInB"
    DIFFERENT = "Different"


class Reason(str, Enum):
    MISSING = "Missing"
    SIZE = "Size"
    DATE = "Date"
    CONTENT = "Content"
    HASH_ERROR = "HashError"


class Verdict(Enum):
    EQUAL = "equal"
    UNEQUAL = "unequal"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class FileRecord:
    relative_path: str
    size: int
    mtime_ns: int
    absolute_path: Path


Inventory = Mapping[str, FileRecord]


@dataclass(slots=True, frozen=True)
class Difference:
    """One discrepancy for a relative path; ``None`` marks an absent side."""

    path: str
    size_a: int | None
    size_b: int | None
    mtime_a_ns: int | None
    mtime_b_ns: int | None
    reason: Reason
    status: Status

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.status.value, self.path)
