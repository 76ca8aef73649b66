from __future__ import annotations

import argparse
import os
import random
import sys
from typing import List, Optional

from catch.constants import DATA_TAG, DEC_TAG, OCT_TAG, HEX_TAG, STORE_ENCODING, STORE_ERRORS
from catch.variants import Variant


_TAGS = {"data": DATA_TAG, "dec": DEC_TAG, "oct": OCT_TAG, "hex": HEX_TAG}


def _read_lines(path: str) -> List[str]:
    with open(path, "r", encoding=STORE_ENCODING, errors=STORE_ERRORS) as f:
        return f.read().splitlines()


def _write_lines(path: str, lines: List[str]) -> None:
    with open(path, "w", encoding=STORE_ENCODING, errors=STORE_ERRORS, newline="\n") as f:
        f.write("".join(ln + "\n" for ln in lines))
        f.flush()
        os.fsync(f.fileno())


def _tagged_line_indices(lines: List[str], tag: str, entry: int) -> List[int]:
    """Indices of lines starting with ``tag`` inside the entry-th entry (0-based)."""
    seen = -1
    inside = False
    found: List[int] = []
    for i, ln in enumerate(lines):
        marker = ln.rstrip()
        if Variant.from_begin(marker) is not None:
            seen += 1
            inside = True
            continue
        if Variant.from_end(marker) is not None:
            inside = False
            continue
        if inside and seen == entry and ln.startswith(tag):
            found.append(i)
    if not found:
        raise ValueError(f"No {tag} line in entry {entry}")
    return found


def cmd_truncate(args: argparse.Namespace) -> None:
    tag = _TAGS[args.field]
    lines = _read_lines(args.store)
    idx = _tagged_line_indices(lines, tag, args.entry)[0]
    tokens = lines[idx][len(tag):].split()
    lines[idx] = tag + " " + " ".join(tokens[: args.keep])
    _write_lines(args.store, lines)
    print(f"Truncated {tag} line of entry {args.entry} to {min(args.keep, len(tokens))} token(s)")


def cmd_inject(args: argparse.Namespace) -> None:
    tag = _TAGS[args.field]
    lines = _read_lines(args.store)
    idx = _tagged_line_indices(lines, tag, args.entry)[0]
    tokens = lines[idx][len(tag):].split()
    pos = min(max(args.position, 0), len(tokens))
    tokens.insert(pos, args.token)
    lines[idx] = tag + " " + " ".join(tokens)
    _write_lines(args.store, lines)
    print(f"Inserted {args.token!r} at token {pos} of {tag} line in entry {args.entry}")


def cmd_random(args: argparse.Namespace) -> None:
    rng = random.Random(args.seed)
    flips = 0
    size = os.path.getsize(args.store)
    if size == 0:
        raise ValueError("Store is empty")
    with open(args.store, "r+b") as f:
        for _ in range(args.count):
            pos = rng.randrange(0, size)
            f.seek(pos)
            b = f.read(1)
            if not b or b == b"\n":
                continue
            f.seek(pos)
            # Stay printable ASCII so the store remains decodable text
            f.write(bytes([rng.randrange(0x21, 0x7F)]))
            flips += 1
        f.flush()
        os.fsync(f.fileno())
    print(f"Replaced {flips} character(s) at random offsets")


def main(argv: Optional[list[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="catch.corrupt", description="Damage catch stores for testing decoder tolerance")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_trunc = sub.add_parser("truncate", help="Keep only the first N tokens of a payload line")
    p_trunc.add_argument("store", help="Path to store file")
    p_trunc.add_argument("--field", choices=sorted(_TAGS), required=True, help="Which payload line to damage")
    p_trunc.add_argument("--entry", type=int, default=0, help="Entry index in file order (default 0)")
    p_trunc.add_argument("--keep", type=int, default=0, help="Tokens to keep (default 0)")
    p_trunc.set_defaults(func=cmd_truncate)

    p_inj = sub.add_parser("inject", help="Insert a token into a payload line")
    p_inj.add_argument("store", help="Path to store file")
    p_inj.add_argument("--field", choices=sorted(_TAGS), required=True, help="Which payload line to damage")
    p_inj.add_argument("--entry", type=int, default=0, help="Entry index in file order (default 0)")
    p_inj.add_argument("--token", default="ZZ", help="Token to insert (default ZZ)")
    p_inj.add_argument("--position", type=int, default=0, help="Token position (default 0)")
    p_inj.set_defaults(func=cmd_inject)

    p_rand = sub.add_parser("random", help="Overwrite N random characters anywhere in the store")
    p_rand.add_argument("store", help="Path to store file")
    p_rand.add_argument("--count", type=int, default=1, help="Number of characters to replace (default 1)")
    p_rand.add_argument("--seed", type=int, default=None, help="PRNG seed for reproducibility")
    p_rand.set_defaults(func=cmd_random)

    args = ap.parse_args(argv)
    try:
        args.func(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
