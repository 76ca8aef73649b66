"""
catch: small network utility with a plain-text, append-only payload store.

Features:

- HTTP download of a single URL (httpx), optionally archived into a store.
- ICMP echo requests with sent/received/loss and min/max/average round trip.
- Stores: flat text files of named entries, each delimited by marker lines.
  Standard layout (``---ENTRY---``) writes hex ``DATA:`` lines of 16 bytes;
  quantum layout (``###ENTRY###``) writes ``[DEC]``, ``[OCT]`` and ``[HEX]``
  lines, of which only ``[HEX]`` is read back.
- Extraction by exact name; the first matching entry in file order wins.

Stores are append-only and unlocked: concurrent writers to the same store can
interleave blocks and break marker pairing.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "writer",
    "reader",
    "fetch",
    "ping",
]

# Importable programmatic API is available via catch.writer.append_entry and
# catch.reader.extract; the CLI functions in catch.cli (cmd_get/cmd_load) take
# normal parameters.
