"""
Endpoint and timeout defaults for the probe.

Values can be overridden with AUTHPROBE_HOST / AUTHPROBE_PORT in the
environment, and again on the command line.
"""

import os

# Test configuration
SERVER_HOST = os.environ.get("AUTHPROBE_HOST", "localhost")
SERVER_PORT = os.environ.get("AUTHPROBE_PORT", "33481")
CONNECT_TIMEOUT = 5  # seconds to establish the TCP connection
READ_TIMEOUT = 2  # seconds of silence before we stop reading

# "crlf" is canonical HTTP/1.1; "lf" is the bare framing some peers tolerate
FRAMINGS = ("crlf", "lf")
DEFAULT_FRAMING = "crlf"

LINE_ENDINGS = {
    "crlf": b"\r\n",
    "lf": b"\n",
}


def parse_port(value):
    """Turn a port string into an int, raising ValueError when out of range"""
    port = int(value)
    if not 0 < port < 65536:
        raise ValueError(f"port out of range: {value}")
    return port
