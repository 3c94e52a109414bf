"""
Sending an envelope and collecting whatever comes back.

send_request() is the raw path: one TCP connection, the request bytes exactly
as rendered, then everything the peer writes until it closes or goes quiet.
send_with_requests() pushes the same body and token through the requests
library, for comparing the server's answer against a compliant HTTP client.
"""

import socket

import requests

from authprobe import config
from authprobe.envelope import AUTH_HEADER
from authprobe.errors import TransportError


def _read_until_quiet(sock, read_timeout):
    """
    Read until EOF or until nothing arrives for read_timeout seconds.

    Returns (data, closed_by_peer); closed_by_peer is False when the read
    stopped on the idle timeout and the response may be cut short.
    """
    response = b""
    sock.settimeout(read_timeout)
    try:
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                return response, True
            response += chunk
    except socket.timeout:
        return response, False


def send_request(wire, host=config.SERVER_HOST, port=config.SERVER_PORT,
                 timeout=config.CONNECT_TIMEOUT, read_timeout=config.READ_TIMEOUT):
    """Send a WireRequest over a fresh connection; returns (response, closed_by_peer)"""
    port = int(port)
    payload = wire.to_bytes()

    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except socket.gaierror as e:
        raise TransportError(f"cannot resolve host: {e}", host, port) from e
    except socket.timeout as e:
        raise TransportError(f"connect timed out after {timeout}s", host, port) from e
    except OSError as e:
        raise TransportError(f"cannot connect: {e}", host, port) from e

    with sock:
        try:
            sock.sendall(payload)
        except OSError as e:
            raise TransportError(f"write failed after connecting: {e}", host, port) from e

        try:
            sock.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already closed; the read below reports what it sent

        try:
            response, closed = _read_until_quiet(sock, read_timeout)
        except OSError as e:
            raise TransportError(f"read failed: {e}", host, port) from e

    if not response and not closed:
        raise TransportError(f"no response within {read_timeout}s", host, port)
    return response, closed


def format_response(response):
    """Render a requests.Response the way it would look on the wire"""
    reason = response.reason or ""
    lines = [f"HTTP/1.1 {response.status_code} {reason}".rstrip()]
    for name, value in response.headers.items():
        lines.append(f"{name}: {value}")
    head = "\r\n".join(lines).encode("latin-1", "replace")
    return head + b"\r\n\r\n" + response.content


def send_with_requests(wire, host=config.SERVER_HOST, port=config.SERVER_PORT,
                       timeout=config.CONNECT_TIMEOUT, read_timeout=config.READ_TIMEOUT):
    """
    Send the envelope's body and auth header through requests.

    requests reads by Content-Length, so a returned response is always complete.
    """
    port = int(port)
    url = f"http://{host}:{port}/"
    headers = {"Content-Type": "application/json"}
    token = wire.header(AUTH_HEADER)
    if token is not None:
        # bytes values are passed through to the wire untouched
        headers[AUTH_HEADER] = token

    try:
        with requests.Session() as session:
            response = session.post(
                url,
                data=wire.body,
                headers=headers,
                timeout=(timeout, read_timeout),
                allow_redirects=False,
            )
    except requests.exceptions.ConnectionError as e:
        raise TransportError(f"cannot connect: {e}", host, port) from e
    except requests.exceptions.RequestException as e:
        raise TransportError(f"request failed: {e}", host, port) from e

    return format_response(response), True


TRANSPORTS = {
    "raw": send_request,
    "requests": send_with_requests,
}
