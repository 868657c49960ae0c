"""
dispatch.py — turn one request line into one response.

    GET /foo/bar.html HTTP/1.0
      -> sanitize -> split query -> classify -> handler
"""
import logging
from dataclasses import dataclass
from typing import Optional

from . import handlers
from .config import ContentTypes
from .paths import FsEntryKind, classify, sanitize, split_query

log = logging.getLogger(__name__)

MAX_RQ_LEN = 4096
SUPPORTED_METHODS = ("GET", "HEAD")


@dataclass(frozen=True)
class Request:
    method: str
    raw_target: str
    path: str
    query: Optional[str] = None

    @property
    def send_body(self):
        return self.method != "HEAD"


def parse_request(line: str) -> Optional[Request]:
    """Build a Request from `line`, or None if it lacks a method and target."""
    tokens = line.split()
    if len(tokens) < 2:
        return None
    method, target = tokens[0], tokens[1]
    path, query = split_query(sanitize(target))
    # "..?x" only becomes ".." once the query is cut off
    return Request(method, target, sanitize(path), query)


def dispatch(request_line: str, out, content_types: Optional[ContentTypes] = None):
    """Write the response for `request_line` to the binary stream `out`."""
    if content_types is None:
        content_types = ContentTypes()

    request = parse_request(request_line)
    if request is None:
        log.info("bad request: %r", request_line.rstrip())
        handlers.bad_request(out)
        return
    if request.method not in SUPPORTED_METHODS:
        log.info("unsupported method %s", request.method)
        handlers.cannot_do(out)
        return

    item = request.path
    kind = classify(item)
    log.debug("%s %s -> %s (%s)", request.method, request.raw_target, item, kind.value)
    if kind is FsEntryKind.MISSING:
        handlers.do_404(item, out)
    elif kind is FsEntryKind.FORBIDDEN:
        handlers.do_403(item, out)
    elif kind is FsEntryKind.DIRECTORY:
        handlers.do_dir(item, out, request.method, content_types, request.query)
    elif kind is FsEntryKind.CGI:
        handlers.do_exec(item, out, request.method, request.query)
    else:
        handlers.do_cat(item, out, content_types, send_body=request.send_body)


def readline(fp, limit=MAX_RQ_LEN):
    """Read one line from `fp`, keeping at most `limit` bytes of it.

    The rest of an overlong line is consumed and dropped. Returns None at EOF when nothing was read.
    """
    line = fp.readline(limit)
    if not line:
        return None
    if not line.endswith(b"\n"):
        while True:
            rest = fp.readline(limit)
            if not rest or rest.endswith(b"\n"):
                break
    return line.decode("utf-8", "surrogateescape")


def read_request(fp) -> Optional[str]:
    """Read the request line and throw away the header block behind it."""
    request_line = readline(fp)
    if request_line is None:
        return None
    while True:
        line = readline(fp)
        if line is None or line in ("\r\n", "\n"):
            break
    return request_line


def serve_connection(fpin, fpout, content_types: Optional[ContentTypes] = None) -> int:
    """Serve one request from `fpin` to `fpout`. Returns the worker's exit status."""
    request_line = read_request(fpin)
    if request_line is None:
        return 1
    log.info("got a call: request = %s", request_line.rstrip())
    dispatch(request_line, fpout, content_types)
    fpout.flush()
    return 0
