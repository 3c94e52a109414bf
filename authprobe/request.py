"""
JSON-RPC 2.0 request bodies.

The body is minified and keeps the key order jsonrpc, id, method, params so
that it reads the same in the server's logs every run.
"""

import json

from authprobe.errors import BuildError

JSONRPC_VERSION = "2.0"


def _check_id(call_id):
    # bool is an int subclass but not a usable id
    if isinstance(call_id, bool) or not isinstance(call_id, (str, int)):
        raise BuildError(f"id must be a string or integer, got {type(call_id).__name__}")
    return call_id


def build_request(call_id, method, params):
    """Serialize a positional-params call to UTF-8 JSON bytes"""
    _check_id(call_id)

    if not isinstance(method, str) or not method:
        raise BuildError("method must be a non-empty string")

    if not isinstance(params, (list, tuple)):
        raise BuildError(f"params must be a list, got {type(params).__name__}")

    document = {
        "jsonrpc": JSONRPC_VERSION,
        "id": call_id,
        "method": method,
        "params": list(params),
    }

    try:
        body = json.dumps(
            document,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise BuildError(f"cannot serialize call to {method!r}: {e}") from e

    return body
