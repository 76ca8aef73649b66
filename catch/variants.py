from __future__ import annotations

import enum
from typing import Optional

from .constants import (
    STANDARD_BEGIN,
    STANDARD_END,
    QUANTUM_BEGIN,
    QUANTUM_END,
    DATA_TAG,
    HEX_TAG,
    QUANTUM_EXT,
)


class Variant(enum.Enum):
    """Textual layout of a single store entry.

    Each member carries its begin/end markers and the tag of the one payload
    line the reader decodes. The variant is chosen per write and is not
    recorded anywhere else in the file.
    """

    STANDARD = ("standard", STANDARD_BEGIN, STANDARD_END, DATA_TAG)
    QUANTUM = ("quantum", QUANTUM_BEGIN, QUANTUM_END, HEX_TAG)

    def __init__(self, label: str, begin: str, end: str, payload_tag: str):
        self.label = label
        self.begin = begin
        self.end = end
        self.payload_tag = payload_tag

    @classmethod
    def from_begin(cls, line: str) -> Optional["Variant"]:
        for v in cls:
            if line == v.begin:
                return v
        return None

    @classmethod
    def from_end(cls, line: str) -> Optional["Variant"]:
        for v in cls:
            if line == v.end:
                return v
        return None

    @classmethod
    def from_payload_line(cls, line: str) -> Optional["Variant"]:
        for v in cls:
            if line.startswith(v.payload_tag):
                return v
        return None


def variant_for_path(path: str) -> Variant:
    """Pick the write variant from a store path (``.dqb`` -> quantum)."""
    if str(path).endswith(QUANTUM_EXT):
        return Variant.QUANTUM
    return Variant.STANDARD
