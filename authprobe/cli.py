"""Command line entry point for the admin-auth probe"""

import argparse
import sys

from authprobe import config
from authprobe.scenarios import Console, run_all
from authprobe.transport import TRANSPORTS


def port_type(value):
    try:
        return config.parse_port(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="authprobe",
        description="Send the five X-Admin-Auth probes to a JSON-RPC server and print the raw responses",
    )
    parser.add_argument("port_arg", nargs="?", type=port_type, metavar="PORT",
                        help="server port (same as --port)")
    parser.add_argument("--host", default=config.SERVER_HOST,
                        help=f"server host (default: {config.SERVER_HOST})")
    parser.add_argument("--port", type=port_type, default=None,
                        help=f"server port (default: {config.SERVER_PORT})")
    parser.add_argument("--timeout", type=float, default=config.CONNECT_TIMEOUT,
                        help="connect timeout in seconds")
    parser.add_argument("--read-timeout", type=float, default=config.READ_TIMEOUT,
                        help="stop reading after this many idle seconds")
    parser.add_argument("--framing", choices=config.FRAMINGS, default=None,
                        help=f"header line endings for the raw transport (default: {config.DEFAULT_FRAMING})")
    parser.add_argument("--transport", choices=sorted(TRANSPORTS), default="raw",
                        help="send with a raw socket or through requests")
    parser.add_argument("--show-request", action="store_true",
                        help="print each request before its response")
    parser.add_argument("--no-color", action="store_true", help="disable ANSI colors")
    args = parser.parse_args(argv)

    if args.transport != "raw" and args.framing is not None:
        parser.error("--framing only applies to --transport raw")
    if args.framing is None:
        args.framing = config.DEFAULT_FRAMING

    if args.port is None:
        args.port = args.port_arg
    if args.port is None:
        try:
            args.port = config.parse_port(config.SERVER_PORT)
        except ValueError:
            parser.error(f"invalid AUTHPROBE_PORT: {config.SERVER_PORT}")
    return args


def main(argv=None):
    """Run all scenarios; exit status 1 when any of them got no response"""
    args = parse_args(argv)
    console = Console(color=not args.no_color and sys.stdout.isatty())

    console.banner("X-Admin-Auth Probe")
    if args.transport == "raw":
        mode = f"raw, {args.framing}"
        request_title = "Request:"
    else:
        mode = args.transport
        request_title = f"Raw envelope ({args.transport} adds its own headers):"
    console.write(f"Target: {args.host}:{args.port} ({mode})")

    try:
        results = run_all(
            console=console,
            show_request=args.show_request,
            request_title=request_title,
            host=args.host,
            port=args.port,
            framing=args.framing,
            send=TRANSPORTS[args.transport],
            timeout=args.timeout,
            read_timeout=args.read_timeout,
        )
    except KeyboardInterrupt:
        console.write("\n\nProbe interrupted by user")
        return 1

    if all(result.ok for result in results):
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main())
