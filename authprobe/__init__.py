"""
authprobe - manual probe for X-Admin-Auth handling on a JSON-RPC HTTP server
"""

from authprobe.errors import BuildError, ProbeError, TransportError
from authprobe.request import build_request
from authprobe.envelope import WireRequest, build_envelope
from authprobe.transport import send_request

__version__ = "0.1.0"

__all__ = [
    "BuildError",
    "ProbeError",
    "TransportError",
    "WireRequest",
    "build_envelope",
    "build_request",
    "send_request",
]
