"""
handlers.py — the response writers.

Every writer starts with header(): status line, Date, Server and an
optional Content-Type. What follows the header is up to the writer.
`out` is a binary stream (the socket's makefile("wb") in a worker).
"""
import logging
import os
import shutil
import subprocess

from . import CONTENT_DEFAULT, SERVER_TAG
from .config import ContentTypes
from .listing import list_directory
from .paths import file_type
from .webtime import rfc822_time

log = logging.getLogger(__name__)

INDEX_HTML = "index.html"
INDEX_CGI = "index.cgi"


def write_text(out, text):
    out.write(text.encode("utf-8", "surrogateescape"))


def header(out, code, msg, content_type=None):
    """Write the response head, minus the blank line.

    content_type None leaves the header out, "" means the server default.
    """
    lines = [
        f"HTTP/1.0 {code} {msg}\r\n",
        f"Date: {rfc822_time()}\r\n",
        f"Server: {SERVER_TAG}\r\n",
    ]
    if content_type is not None:
        lines.append(f"Content-Type: {content_type or CONTENT_DEFAULT}\r\n")
    write_text(out, "".join(lines))


def bad_request(out):
    header(out, 400, "Bad Request", "text/plain")
    write_text(out, "\r\nI cannot understand your request\r\n")


def cannot_do(out):
    header(out, 501, "Not Implemented", "text/plain")
    write_text(out, "\r\nThat command is not yet implemented\r\n")


def do_404(item, out):
    header(out, 404, "Not Found", "text/plain")
    write_text(out, f"\r\nThe item you requested: {item}\r\nis not found\r\n")


def do_403(item, out):
    header(out, 403, "Forbidden", "text/plain")
    write_text(out, f"\r\nYou do not have permission to access {item} on this server\r\n")


def do_cat(path, out, content_types: ContentTypes, send_body=True):
    """Send `path` with a Content-Type picked by its extension."""
    header(out, 200, "OK", content_types.lookup(file_type(path)))
    write_text(out, "\r\n")
    if not send_body:
        return
    try:
        f = open(path, "rb")
    except OSError as e:
        # lost a race with the filesystem after classify(); headers only
        log.warning("cannot open %s: %s", path, e.strerror)
        return
    with f:
        shutil.copyfileobj(f, out)


def cgi_environ(prog, method, query=None):
    """Environment for one CGI run. Built fresh for every request."""
    env = dict(os.environ)
    env.pop("QUERY_STRING", None)
    env.update(
        GATEWAY_INTERFACE="CGI/1.1",
        SERVER_PROTOCOL="HTTP/1.0",
        SERVER_SOFTWARE=SERVER_TAG,
        SCRIPT_NAME="/" + os.path.normpath(prog),
        REQUEST_METHOD=method,
    )
    if query is not None:
        env["QUERY_STRING"] = query
    return env


def do_exec(prog, out, method, query=None):
    """Run a CGI program; it writes the rest of the response itself."""
    header(out, 200, "OK")
    out.flush()

    argv = [prog if os.path.isabs(prog) else os.path.join(os.curdir, prog)]
    env = cgi_environ(prog, method, query)
    try:
        fd = out.fileno()
    except (AttributeError, OSError):
        fd = None
    try:
        if fd is None:
            result = subprocess.run(argv, env=env, stdout=subprocess.PIPE,
                                    stderr=subprocess.STDOUT)
            out.write(result.stdout)
        else:
            result = subprocess.run(argv, env=env, stdout=fd, stderr=fd)
    except OSError as e:
        log.error("%s: %s", prog, e.strerror or e)
        return
    log.debug("%s exited with status %d", prog, result.returncode)


def do_dir(path, out, method, content_types: ContentTypes, query=None):
    """Serve an index file from `path` if there is one, else list it."""
    html = os.path.join(path, INDEX_HTML)
    cgi = os.path.join(path, INDEX_CGI)
    if os.path.exists(html):
        do_cat(html, out, content_types, send_body=method != "HEAD")
    elif os.path.exists(cgi):
        do_exec(cgi, out, method, query)
    else:
        do_ls(path, out, send_body=method != "HEAD")


def do_ls(path, out, send_body=True):
    header(out, 200, "OK", "text/html")
    write_text(out, "\r\n")
    if send_body:
        list_directory(path, out)
