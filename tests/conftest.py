"""
Stub JSON-RPC server for the probe tests.

It applies the same policy as the real admin server: "f" needs
X-Admin-Auth: root, "g" is open. Every request's raw bytes and parsed auth
header are recorded so tests can look at exactly what went over the wire.
"""

import json
import socket
import socketserver
import threading

import pytest

UNAUTHORIZED = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

PROTECTED = {"f"}
SECRET = "root"


def saturate(value):
    return max(0, min(255, value))


METHODS = {
    "f": lambda a, b: saturate(a * 10 + b + 2),
    "g": lambda a, b: saturate(a * 10 + b - 3),
}


def is_visible_ascii(value):
    return all(byte == 0x09 or 0x20 <= byte < 0x7F for byte in value)


def check_auth(method, token):
    """Return an error message when the call is not allowed, else None"""
    if method not in PROTECTED:
        return None
    if token is None:
        return "X-Admin-Auth header required"
    if not is_visible_ascii(token):
        return "X-Admin-Auth header value must contain only visible ASCII characters"
    if token.decode("ascii") != SECRET:
        return f"X-Admin-Auth must be '{SECRET}'"
    return None


def dispatch(call, token):
    call_id = call.get("id")
    method = call.get("method")

    message = check_auth(method, token)
    if message:
        return {"jsonrpc": "2.0", "error": {"code": UNAUTHORIZED, "message": message}, "id": call_id}

    if method not in METHODS:
        return {"jsonrpc": "2.0", "error": {"code": METHOD_NOT_FOUND, "message": "Method not found"}, "id": call_id}

    params = call.get("params", [])
    if len(params) != 2 or not all(isinstance(p, int) and 0 <= p <= 255 for p in params):
        return {"jsonrpc": "2.0", "error": {"code": INVALID_PARAMS, "message": "Invalid params"}, "id": call_id}

    return {"jsonrpc": "2.0", "result": METHODS[method](*params), "id": call_id}


class RecordedRequest:
    def __init__(self, raw, headers, body):
        self.raw = raw
        self.headers = headers
        self.body = body

    @property
    def auth(self):
        return self.headers.get("x-admin-auth")


class StubRpcHandler(socketserver.StreamRequestHandler):
    def handle(self):
        raw = b""
        request_line = self.rfile.readline()
        raw += request_line

        headers = {}
        while True:
            line = self.rfile.readline()
            raw += line
            if line in (b"\r\n", b"\n", b""):
                break
            name, _, value = line.rstrip(b"\r\n").partition(b":")
            headers[name.decode("ascii").strip().lower()] = value.strip()

        length = int(headers.get("content-length", b"0"))
        body = self.rfile.read(length)
        raw += body
        self.server.received.append(RecordedRequest(raw, headers, body))

        reply = json.dumps(dispatch(json.loads(body), headers.get("x-admin-auth"))).encode()
        self.wfile.write(
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/json\r\n"
            b"Content-Length: " + str(len(reply)).encode() + b"\r\n"
            b"Connection: close\r\n"
            b"\r\n" + reply
        )


class StubRpcServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, handler=StubRpcHandler):
        super().__init__(("127.0.0.1", 0), handler)
        self.received = []

    @property
    def host(self):
        return self.server_address[0]

    @property
    def port(self):
        return self.server_address[1]


def serve(server):
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return thread


@pytest.fixture
def stub_server():
    """A running stub server on an ephemeral loopback port"""
    server = StubRpcServer()
    thread = serve(server)
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


class StallingHandler(socketserver.BaseRequestHandler):
    """Sends server.preamble (maybe nothing) and then holds the connection open"""

    def handle(self):
        self.request.recv(65536)
        if self.server.preamble:
            self.request.sendall(self.server.preamble)
        self.server.release.wait(timeout=5)


@pytest.fixture
def stalling_server():
    server = StubRpcServer(handler=StallingHandler)
    server.preamble = b"HTTP/1.1 200 OK\r\n"
    server.release = threading.Event()
    thread = serve(server)
    try:
        yield server
    finally:
        server.release.set()
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def closed_port():
    """A loopback port with nothing listening on it"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
