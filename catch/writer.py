from __future__ import annotations

import os
from typing import List, Optional, TextIO, Union

from .codec import hex_tokens, dec_tokens, oct_tokens, wrap_tokens, join_tokens
from .constants import (
    NAME_TAG,
    SIZE_TAG,
    DATA_TAG,
    DEC_TAG,
    OCT_TAG,
    HEX_TAG,
    STORE_ENCODING,
    STORE_ERRORS,
)
from .variants import Variant


PathLike = Union[str, os.PathLike]


def _check_name(name: str) -> None:
    if "\n" in name or "\r" in name:
        raise ValueError(f"Entry name may not contain a line break: {name!r}")
    # Fails (UnicodeEncodeError) before the store is opened
    name.encode(STORE_ENCODING, STORE_ERRORS)


def _payload_lines(payload: bytes, variant: Variant) -> List[str]:
    if variant is Variant.QUANTUM:
        # All three are always written; only [HEX] is read back.
        return [
            f"{DEC_TAG} {join_tokens(dec_tokens(payload))}",
            f"{OCT_TAG} {join_tokens(oct_tokens(payload))}",
            f"{HEX_TAG} {join_tokens(hex_tokens(payload))}",
        ]
    return [f"{DATA_TAG} {join_tokens(row)}" for row in wrap_tokens(hex_tokens(payload))]


def format_entry(name: str, payload: bytes, variant: Variant = Variant.STANDARD) -> str:
    """Render one complete entry block, markers included.

    Args:
        name: Entry name; stored verbatim after ``NAME:``.
        payload: Raw bytes to encode.
        variant: Layout to use.

    Returns:
        The block as text, each line terminated by ``\\n``.

    Raises:
        ValueError: If ``name`` contains a line break.
    """
    _check_name(name)
    payload = bytes(payload)
    lines = [variant.begin, f"{NAME_TAG}{name}", f"{SIZE_TAG}{len(payload)}"]
    lines += _payload_lines(payload, variant)
    lines.append(variant.end)
    return "".join(line + "\n" for line in lines)


class StoreWriter:
    """Append-only writer for a store file.

    Opening never truncates; each ``add`` writes one full block at the current
    end of file. There is no locking, so two writers appending to the same
    store at once can interleave their blocks.
    """

    def __init__(self, path: PathLike):
        self.path = path
        self.f: Optional[TextIO] = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.f is not None:
            return
        self.f = open(self.path, "a", encoding=STORE_ENCODING, errors=STORE_ERRORS, newline="\n")

    def close(self):
        if self.f is not None:
            self.f.close()
            self.f = None

    def add(self, name: str, payload: bytes, variant: Variant = Variant.STANDARD) -> int:
        """Append one entry and return the payload length recorded in SIZE."""
        if self.f is None:
            raise RuntimeError("StoreWriter is not open")
        self.f.write(format_entry(name, payload, variant))
        return len(payload)


def append_entry(archive_path: PathLike, name: str, payload: bytes, variant: Variant = Variant.STANDARD) -> None:
    """Append a named payload to ``archive_path``, creating the file if needed.

    The name is validated before the file is opened, so a rejected name
    leaves no trace on disk. OSError from open/write propagates unchanged.
    """
    _check_name(name)
    with StoreWriter(archive_path) as w:
        w.add(name, payload, variant)
