from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .constants import BYTES_PER_LINE


_HEX_TOKEN = re.compile(r"\+?[0-9A-Fa-f]+")


def hex_tokens(data: bytes) -> List[str]:
    return [f"{b:02X}" for b in data]


def dec_tokens(data: bytes) -> List[str]:
    return [str(b) for b in data]


def oct_tokens(data: bytes) -> List[str]:
    # Unpadded: 8 -> "10", 0 -> "0"
    return [f"{b:o}" for b in data]


def wrap_tokens(tokens: List[str], width: int = BYTES_PER_LINE) -> List[List[str]]:
    """Split tokens into rows of at most ``width``.

    An empty token list still yields a single empty row so that an empty
    payload gets one (bare) payload line.
    """
    if not tokens:
        return [[]]
    return [tokens[i:i + width] for i in range(0, len(tokens), width)]


def parse_hex_token(token: str) -> Optional[int]:
    """Return the byte value of a hex token, or None if it is not one.

    Hex digits of either case with an optional leading ``+``; leading zeros
    are fine (``0042``, ``+41``). ``0x`` prefixes, ``-`` and values above
    0xFF are rejected.
    """
    if _HEX_TOKEN.fullmatch(token) is None:
        return None
    value = int(token, 16)
    if value > 0xFF:
        return None
    return value


def decode_hex_tokens(text: str) -> bytes:
    """Decode whitespace-separated hex tokens, silently dropping invalid ones."""
    out = bytearray()
    for tok in text.split():
        b = parse_hex_token(tok)
        if b is not None:
            out.append(b)
    return bytes(out)


def join_tokens(tokens: Iterable[str]) -> str:
    return " ".join(tokens)
