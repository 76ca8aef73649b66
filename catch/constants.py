# Entry markers (one pair per variant)
STANDARD_BEGIN = "---ENTRY---"
STANDARD_END = "---END---"
QUANTUM_BEGIN = "###ENTRY###"
QUANTUM_END = "###END###"

# Field tags
NAME_TAG = "NAME:"
SIZE_TAG = "SIZE:"
DATA_TAG = "DATA:"
DEC_TAG = "[DEC]"
OCT_TAG = "[OCT]"
HEX_TAG = "[HEX]"

# Standard variant wraps DATA: lines after this many bytes
BYTES_PER_LINE = 16

# Store file extensions; the quantum one selects the quantum variant on write
STANDARD_EXT = ".dlb"
QUANTUM_EXT = ".dqb"

STORE_ENCODING = "utf-8"
# Undecodable bytes round-trip as lone surrogates
STORE_ERRORS = "surrogateescape"


# Fetch
DEFAULT_OUTPUT = "output.html"
DEFAULT_FETCH_TIMEOUT = 30.0  # seconds


# Ping (ICMP echo)
ICMP_ECHO_REQUEST = 8
ICMP_ECHO_REPLY = 0
ICMP_HEADER_LEN = 8
PING_IDENT = 1
DEFAULT_PING_COUNT = 4
DEFAULT_PING_TIMEOUT = 2.0  # seconds
RECV_BUFSIZE = 1024
