from __future__ import annotations

import ipaddress
import socket
import struct
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .constants import (
    ICMP_ECHO_REQUEST,
    ICMP_ECHO_REPLY,
    ICMP_HEADER_LEN,
    PING_IDENT,
    DEFAULT_PING_COUNT,
    DEFAULT_PING_TIMEOUT,
    RECV_BUFSIZE,
)
from .errors import PingError


_ICMP_HDR = struct.Struct("!BBHHH")  # type, code, checksum, ident, seq


def checksum(data: bytes) -> int:
    """RFC 1071 internet checksum over ``data``.

    Big-endian 16-bit words; an odd trailing byte is padded on the right.
    """
    total = 0
    n = len(data) - (len(data) % 2)
    for i in range(0, n, 2):
        total += (data[i] << 8) | data[i + 1]
    if len(data) % 2:
        total += data[-1] << 8
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return ~total & 0xFFFF


def build_echo_request(ident: int, seq: int) -> bytes:
    """Build an 8-byte ICMP echo request header with its checksum filled in."""
    hdr = _ICMP_HDR.pack(ICMP_ECHO_REQUEST, 0, 0, ident & 0xFFFF, seq & 0xFFFF)
    csum = checksum(hdr)
    return hdr[:2] + struct.pack("!H", csum) + hdr[4:]


def parse_echo_reply(packet: bytes) -> Optional[tuple[int, int]]:
    """Return (ident, seq) if ``packet`` (IPv4 header included) is an echo reply."""
    if not packet:
        return None
    ihl = (packet[0] & 0x0F) * 4
    icmp = packet[ihl:ihl + ICMP_HEADER_LEN]
    if len(icmp) < ICMP_HEADER_LEN:
        return None
    icmp_type, _code, _csum, ident, seq = _ICMP_HDR.unpack(icmp)
    if icmp_type != ICMP_ECHO_REPLY:
        return None
    return ident, seq


@dataclass
class PingStats:
    host: str
    sent: int = 0
    received: int = 0
    times: List[float] = field(default_factory=list)  # seconds

    @property
    def lost(self) -> int:
        return self.sent - self.received

    @property
    def loss_percent(self) -> int:
        if self.sent == 0:
            return 0
        return int(self.lost * 100 / self.sent)

    @property
    def minimum(self) -> Optional[float]:
        return min(self.times) if self.times else None

    @property
    def maximum(self) -> Optional[float]:
        return max(self.times) if self.times else None

    @property
    def average(self) -> Optional[float]:
        return sum(self.times) / len(self.times) if self.times else None


def _ms(seconds: float) -> str:
    return f"{seconds * 1000.0:.3f}ms"


def format_stats(stats: PingStats) -> List[str]:
    lines = [
        f"Ping statistics for {stats.host}:",
        f"    Packets: Sent = {stats.sent}, Received = {stats.received}, "
        f"Lost = {stats.lost} ({stats.loss_percent}% loss)",
    ]
    if stats.times:
        lines.append("Approximate round trip times in milli-seconds:")
        lines.append(
            f"    Minimum = {_ms(stats.minimum)}, Maximum = {_ms(stats.maximum)}, "
            f"Average = {_ms(stats.average)}"
        )
    return lines


def _await_reply(sock: socket.socket, seq: int, deadline: float) -> bool:
    # Sequence numbers wrap at 16 bits on the wire
    want = (PING_IDENT, seq & 0xFFFF)
    while True:
        remaining = deadline - time.perf_counter()
        if remaining <= 0:
            return False
        sock.settimeout(remaining)
        try:
            packet = sock.recv(RECV_BUFSIZE)
        except socket.timeout:
            return False
        got = parse_echo_reply(packet)
        if got == want:
            return True


def ping(
    host: str,
    count: int = DEFAULT_PING_COUNT,
    *,
    timeout: float = DEFAULT_PING_TIMEOUT,
    on_reply: Optional[Callable[[int, Optional[float]], None]] = None,
    sock: Optional[socket.socket] = None,
) -> PingStats:
    """Send ``count`` ICMP echo requests to an IPv4 ``host`` and collect timings.

    Args:
        host: Dotted-quad IPv4 address (no name resolution).
        count: Number of echo requests; sequence numbers run 0..count-1.
        timeout: Seconds to wait for each reply before counting it lost.
        on_reply: Called after each request with (seq, rtt seconds or None).
        sock: Optional pre-opened raw socket; the caller keeps ownership.

    Raises:
        PingError: Bad address, or the raw socket could not be opened.
        OSError: Send failures.
    """
    try:
        addr = str(ipaddress.IPv4Address(host))
    except ValueError as exc:
        raise PingError(f"Invalid IPv4 address: {host}") from exc
    if count < 1:
        raise PingError("count must be at least 1")

    own = sock is None
    if own:
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)
        except PermissionError as exc:
            raise PingError("raw ICMP sockets require elevated privileges") from exc

    stats = PingStats(host=addr)
    try:
        for seq in range(count):
            packet = build_echo_request(PING_IDENT, seq)
            start = time.perf_counter()
            sock.sendto(packet, (addr, 0))
            stats.sent += 1
            if _await_reply(sock, seq, start + timeout):
                elapsed = time.perf_counter() - start
                stats.received += 1
                stats.times.append(elapsed)
                if on_reply is not None:
                    on_reply(seq, elapsed)
            elif on_reply is not None:
                on_reply(seq, None)
    finally:
        if own:
            sock.close()
    return stats
