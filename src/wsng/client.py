#!/usr/bin/env python3
"""
client.py — raw HTTP/1.0 client for poking at a running wsng.

Usage:
  wsng-get <server_host> <server_port> <target> [--method M] [--head-only]

Sends exactly one request line (whatever you give it, malformed or not),
reads until the server closes the connection and prints the status,
the headers and the body.

Notes:
  - CLIENT_TIMEOUT (seconds, default 20) bounds the connect and every read;
    a server that stalls longer makes the request fail.
"""
import argparse
import os
import socket
import sys
from typing import Dict, NamedTuple

DEFAULT_TIMEOUT = float(os.getenv("CLIENT_TIMEOUT", "20.0"))  # seconds


class Response(NamedTuple):
    code: int
    headers: Dict[str, str]
    body: bytes


def read_until_close(sock: socket.socket) -> bytes:
    """HTTP/1.0 without keep-alive: the response ends when the server hangs up."""
    with sock.makefile("rb") as f:
        return f.read()


def parse_response(raw: bytes) -> Response:
    """Split a raw reply into status code, lower-cased headers and body.

    A missing or non-numeric status code comes back as 0.
    """
    head, _, body = raw.partition(b"\r\n\r\n")
    status_line, *header_lines = head.decode("iso-8859-1").split("\r\n")
    code = status_line.split(" ", 2)[1:2]
    headers = {}
    for line in header_lines:
        name, sep, value = line.partition(":")
        if sep:
            headers[name.strip().lower()] = value.strip()
    return Response(int(code[0]) if code and code[0].isdecimal() else 0, headers, body)


def send_request(host: str, port: int, request_line: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Send `request_line` plus an empty header block; return the raw reply."""
    req = (request_line.rstrip("\r\n") + "\r\n\r\n").encode("utf-8")
    with socket.create_connection((host, port), timeout=timeout) as s:
        s.settimeout(timeout)
        s.sendall(req)
        return read_until_close(s)


def fetch(host: str, port: int, target: str, method: str = "GET", timeout: float = DEFAULT_TIMEOUT):
    """Send `METHOD target HTTP/1.0` and return (code, headers, body)."""
    return parse_response(send_request(host, port, f"{method} {target} HTTP/1.0", timeout))


def main(argv=None):
    ap = argparse.ArgumentParser(prog="wsng-get", description="Send one HTTP/1.0 request")
    ap.add_argument("host")
    ap.add_argument("port", type=int)
    ap.add_argument("target", help="request target, e.g. /index.html")
    ap.add_argument("--method", default="GET")
    ap.add_argument("--head-only", action="store_true", help="do not print the body")
    args = ap.parse_args(argv)

    try:
        code, headers, body = fetch(args.host, args.port, args.target, args.method)
    except OSError as e:
        print(f"{args.host}:{args.port}: {e}", file=sys.stderr)
        sys.exit(2)

    print(f"HTTP {code}")
    for k, v in headers.items():
        print(f"{k}: {v}")
    if not args.head_only:
        print()
        sys.stdout.flush()
        sys.stdout.buffer.write(body)
    sys.exit(0 if 200 <= code < 300 else 1)


if __name__ == "__main__":
    main()
