from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from catch.constants import (
    DEFAULT_OUTPUT,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_PING_COUNT,
    DEFAULT_PING_TIMEOUT,
)
from catch.errors import CatchError, EntryNotFound
from catch.fetch import download
from catch.ping import ping, format_stats
from catch.reader import StoreReader, extract
from catch.variants import variant_for_path
from catch.writer import append_entry


def cmd_get(url: str, *, output: str = DEFAULT_OUTPUT, store: Optional[str] = None, timeout: float = DEFAULT_FETCH_TIMEOUT) -> bool:
    """Download a URL to a file and optionally archive it into a store.

    Args:
        url: Resource to fetch.
        output: Destination file; also the entry name used in the store.
        store: Store path. A ``.dqb`` suffix selects the quantum layout.
        timeout: HTTP timeout in seconds.
    """
    print(f"Downloading {url} -> {output}", flush=True)
    data = download(url, output, timeout=timeout)
    print(f"Download complete ({len(data)} bytes).")
    if store:
        variant = variant_for_path(store)
        append_entry(store, output, data, variant)
        print(f"Stored {output} into {store} ({variant.label})")
    return True


def cmd_load(store: str, name: str, *, output: str) -> bool:
    """Extract the first entry called ``name`` from ``store`` into ``output``."""
    n = extract(store, name, output)
    print(f"Extracted {name} -> {output} ({n} bytes)")
    return True


def cmd_list(store: str) -> bool:
    """List store entries as ``variant<TAB>size<TAB>name``."""
    with StoreReader(store) as r:
        for e in r.entries():
            size = "?" if e.size is None else str(e.size)
            print(f"{e.variant.label}\t{size}\t{e.name}")
    return True


def cmd_ping(host: str, *, count: int = DEFAULT_PING_COUNT, timeout: float = DEFAULT_PING_TIMEOUT) -> bool:
    """Ping an IPv4 host with ICMP echo and print round-trip statistics.

    Returns:
        True when at least one reply arrived.
    """

    def _report(seq: int, elapsed: Optional[float]) -> None:
        if elapsed is None:
            print(f"Request timeout for seq={seq}")
        else:
            print(f"Reply from {host}: seq={seq} time={elapsed * 1000.0:.3f}ms", flush=True)

    stats = ping(host, count, timeout=timeout, on_reply=_report)
    print()
    for line in format_stats(stats):
        print(line)
    return stats.received > 0


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="catch",
        description="Fetch URLs, ping hosts, and keep downloads in a plain-text store",
        epilog="Stores ending in .dqb are written in the quantum layout; anything else uses the standard layout.",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_get = sub.add_parser("get", help="Download a URL")
    ap_get.add_argument("url", help="URL to fetch")
    ap_get.add_argument("-o", "--output", default=DEFAULT_OUTPUT, help=f"Output file (default {DEFAULT_OUTPUT})")
    ap_get.add_argument("-s", "--store", help="Also append the download to this store (.dlb or .dqb)")
    ap_get.add_argument("--timeout", type=float, default=DEFAULT_FETCH_TIMEOUT, help="HTTP timeout in seconds")

    ap_load = sub.add_parser("load", help="Extract an entry from a store")
    ap_load.add_argument("store", help="Store path")
    ap_load.add_argument("name", help="Entry name (exact, case-sensitive)")
    ap_load.add_argument("-o", "--output", required=True, help="Output file")

    ap_list = sub.add_parser("list", help="List store entries")
    ap_list.add_argument("store", help="Store path")

    ap_ping = sub.add_parser("ping", help="ICMP echo a host (needs raw socket privileges)")
    ap_ping.add_argument("host", help="IPv4 address")
    ap_ping.add_argument("-c", "--count", type=int, default=DEFAULT_PING_COUNT, help=f"Echo requests to send (default {DEFAULT_PING_COUNT})")
    ap_ping.add_argument("--timeout", type=float, default=DEFAULT_PING_TIMEOUT, help="Seconds to wait per reply")
    return ap


def main(argv: List[str] | None = None):
    ap = _build_parser()
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        print("catch | fetch, ping, store")
        ap.print_help()
        return

    args = ap.parse_args(argv)
    try:
        if args.cmd == "get":
            cmd_get(args.url, output=args.output, store=args.store, timeout=args.timeout)
        elif args.cmd == "load":
            cmd_load(args.store, args.name, output=args.output)
        elif args.cmd == "list":
            cmd_list(args.store)
        elif args.cmd == "ping":
            success = cmd_ping(args.host, count=args.count, timeout=args.timeout)
            sys.exit(0 if success else 1)
        else:
            raise RuntimeError("Unknown command")
    except EntryNotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (CatchError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
