"""
Hand-built HTTP/1.1 envelope around a JSON-RPC body.

Header values are kept as raw bytes. The auth token goes on the wire exactly
as given, so a token carrying a byte that is not valid text still reaches the
server unchanged and the server gets to decide what to do with it.
"""

from authprobe import config
from authprobe.errors import BuildError

AUTH_HEADER = "X-Admin-Auth"


def encode_token(token):
    """Return the token as wire bytes, or None when there is nothing to send"""
    if token is None:
        return None
    if isinstance(token, str):
        # surrogateescape gives back any undecodable bytes from argv
        try:
            token = token.encode("utf-8", "surrogateescape")
        except UnicodeError as e:
            raise BuildError(f"cannot encode auth token: {e}") from e
    if not token:
        return None
    return bytes(token)


def encode_host(host):
    """Host header value; international names go out in their IDNA form"""
    if isinstance(host, bytes):
        return host
    try:
        return host.encode("idna")
    except UnicodeError as e:
        raise BuildError(f"cannot encode host {host!r}: {e}") from e


class WireRequest:
    """Request line, ordered headers and body of one POST"""

    def __init__(self, body, host, request_line="POST / HTTP/1.1", framing=config.DEFAULT_FRAMING):
        if framing not in config.LINE_ENDINGS:
            raise ValueError(f"unknown framing {framing!r}, expected one of {config.FRAMINGS}")
        self.request_line = request_line
        self.framing = framing
        self.body = bytes(body)
        self.headers = {}
        self.set_header("Host", encode_host(host))

    def set_header(self, name, value):
        if isinstance(value, str):
            value = value.encode("latin-1")
        self.headers[name] = value

    def header(self, name):
        return self.headers.get(name)

    def to_bytes(self):
        """Render the request; the body is not followed by a line ending"""
        eol = config.LINE_ENDINGS[self.framing]
        lines = [self.request_line.encode("ascii")]
        for name, value in self.headers.items():
            lines.append(name.encode("ascii") + b": " + value)
        return eol.join(lines) + eol + eol + self.body

    def __repr__(self):
        return f"<WireRequest {self.request_line!r} headers={list(self.headers)} body={len(self.body)}B>"


def build_envelope(body, auth_token=None, host=config.SERVER_HOST, framing=config.DEFAULT_FRAMING):
    """Wrap a serialized body in a POST / request for ``host``"""
    wire = WireRequest(body, host, framing=framing)

    token = encode_token(auth_token)
    if token is not None:
        wire.set_header(AUTH_HEADER, token)

    wire.set_header("Content-Type", "application/json")
    # the only place the length is computed, always from the encoded body
    wire.set_header("Content-Length", str(len(wire.body)))
    return wire
