from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from typing import Iterator, List, Optional, TextIO, Union

from .codec import decode_hex_tokens
from .constants import NAME_TAG, SIZE_TAG, STORE_ENCODING, STORE_ERRORS
from .errors import EntryNotFound
from .variants import Variant


PathLike = Union[str, os.PathLike]


@dataclass
class Entry:
    name: str
    payload: bytes
    variant: Variant
    size: Optional[int] = None  # as recorded in SIZE:, never checked against payload


class ScanState(enum.Enum):
    OUTSIDE = 0
    INSIDE_ENTRY = 1


class EntryScanner:
    """Line-driven state machine that reassembles entries from store text.

    Feed lines in file order; ``feed`` returns an Entry each time an end
    marker closes an entry, None otherwise. Only ``DATA:`` and ``[HEX]``
    lines contribute payload bytes. ``[DEC]``/``[OCT]`` are ignored, as are
    unparseable hex tokens.
    """

    def __init__(self):
        self.state = ScanState.OUTSIDE
        self.variant: Optional[Variant] = None
        self.name = ""
        self.size: Optional[int] = None
        self.buf = bytearray()

    def reset(self, variant: Variant) -> None:
        self.variant = variant
        self.name = ""
        self.size = None
        self.buf = bytearray()

    def feed(self, line: str) -> Optional[Entry]:
        line = line.rstrip("\r\n")
        marker = line.rstrip()

        begin = Variant.from_begin(marker)
        if begin is not None:
            # A begin marker inside an entry abandons the unterminated one.
            self.reset(begin)
            self.state = ScanState.INSIDE_ENTRY
            return None

        if self.state is ScanState.OUTSIDE:
            return None

        if Variant.from_end(marker) is not None:
            self.state = ScanState.OUTSIDE
            return Entry(name=self.name, payload=bytes(self.buf), variant=self.variant, size=self.size)

        if line.startswith(NAME_TAG):
            # Only the first colon delimits; the rest is the name verbatim.
            self.name = line.split(":", 1)[1]
        elif line.startswith(SIZE_TAG):
            try:
                self.size = int(line[len(SIZE_TAG):].strip())
            except ValueError:
                self.size = None
        else:
            tagged = Variant.from_payload_line(line)
            if tagged is not None:
                self.buf += decode_hex_tokens(line[len(tagged.payload_tag):])
        return None


class StoreReader:
    """Sequential reader over a store file.

    Every lookup rescans from the start of the file; there is no index.
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
        self.f = open(self.path, "r", encoding=STORE_ENCODING, errors=STORE_ERRORS)

    def close(self):
        if self.f is not None:
            self.f.close()
            self.f = None

    def entries(self) -> Iterator[Entry]:
        if self.f is None:
            raise RuntimeError("StoreReader is not open")
        self.f.seek(0)
        scanner = EntryScanner()
        for line in self.f:
            entry = scanner.feed(line)
            if entry is not None:
                yield entry

    def list(self) -> List[Entry]:
        return list(self.entries())

    def find(self, name: str) -> Entry:
        """Return the first entry named exactly ``name``.

        Raises:
            EntryNotFound: If the scan reaches end of file without a match.
        """
        for entry in self.entries():
            if entry.name == name:
                return entry
        raise EntryNotFound(name, str(self.path))


def iter_entries(archive_path: PathLike) -> Iterator[Entry]:
    """Yield every complete entry of ``archive_path`` in file order."""
    with StoreReader(archive_path) as r:
        yield from r.entries()


def read_entry(archive_path: PathLike, target_name: str) -> bytes:
    """Return the payload of the first entry named ``target_name``."""
    with StoreReader(archive_path) as r:
        return r.find(target_name).payload


def extract(archive_path: PathLike, target_name: str, output_path: PathLike) -> int:
    """Write the payload of the first entry named ``target_name`` to ``output_path``.

    The output file is only created once a match has been found, so a
    missing entry leaves ``output_path`` untouched.

    Args:
        archive_path: Store file to scan.
        target_name: Exact, case-sensitive entry name.
        output_path: Destination; overwritten if it exists.

    Returns:
        Number of bytes written.

    Raises:
        EntryNotFound: No entry with that name.
        OSError: Store unreadable or output not writable.
    """
    data = read_entry(archive_path, target_name)
    with open(output_path, "wb") as out:
        out.write(data)
    return len(data)
