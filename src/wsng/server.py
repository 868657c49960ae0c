#!/usr/bin/env python3
"""
server.py — forking HTTP/1.0 server.

Usage:
  wsng [-c configfile] [--port N] [--root DIR] [-v]

One child process per connection. The parent only accepts, forks and reaps.
SIGINT closes the listening socket and exits 0.
"""
import argparse
import logging
import os
import signal
import socket
import sys

from . import SERVER_NAME, VERSION
from .config import CONFIG_FILE, ConfigError, ContentTypes, load_config
from .dispatch import serve_connection

log = logging.getLogger(__name__)

REQUEST_QUEUE_SIZE = 5


def make_server_socket(port, host=""):
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        s.bind((host, port))
        s.listen(REQUEST_QUEUE_SIZE)
    except OSError:
        s.close()
        raise
    return s


def reap_children(signum=None, frame=None):
    """SIGCHLD handler: collect every finished child without blocking."""
    while True:
        try:
            pid, _ = os.waitpid(-1, os.WNOHANG)
        except ChildProcessError:
            return
        if pid == 0:
            return


class Server:
    def __init__(self, sock: socket.socket, content_types: ContentTypes):
        self.sock = sock
        self.content_types = content_types

    def done(self, signum, frame):
        """SIGINT handler."""
        log.info("closing socket")
        self.sock.close()
        sys.exit(0)

    def install_signals(self):
        signal.signal(signal.SIGINT, self.done)
        signal.signal(signal.SIGCHLD, reap_children)

    def serve_forever(self):
        while True:
            try:
                conn, addr = self.sock.accept()
            except InterruptedError:
                continue
            except OSError as e:
                if self.sock.fileno() == -1:
                    return
                log.error("accept: %s", e)
                continue
            self.handle_call(conn, addr)

    def handle_call(self, conn, addr):
        """Fork a worker for `conn`. The parent's copy is closed either way."""
        try:
            pid = os.fork()
        except OSError as e:
            log.error("fork: %s", e)
            conn.close()
            return
        if pid == 0:
            status = 1
            try:
                status = self.child(conn, addr)
            finally:
                os._exit(status)
        log.debug("forked %d for %s:%d", pid, addr[0], addr[1])
        conn.close()

    def child(self, conn, addr):
        self.sock.close()
        signal.signal(signal.SIGINT, signal.SIG_DFL)
        signal.signal(signal.SIGCHLD, signal.SIG_DFL)
        try:
            with conn, conn.makefile("rb") as fpin, conn.makefile("wb") as fpout:
                return serve_connection(fpin, fpout, self.content_types)
        except (BrokenPipeError, ConnectionResetError) as e:
            log.debug("client %s:%d went away: %s", addr[0], addr[1], e)
            return 1
        except Exception:
            log.exception("worker for %s:%d failed", addr[0], addr[1])
            return 1


def startup(args):
    """Load config, chdir to the server root and open the listening socket.

    Exits the process on any failure.
    """
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    root = args.root if args.root is not None else cfg.root
    port = args.port if args.port is not None else cfg.port

    try:
        os.chdir(root)
    except OSError as e:
        print(f"cannot change to rootdir {root}: {e.strerror}", file=sys.stderr)
        sys.exit(2)
    try:
        sock = make_server_socket(port)
    except OSError as e:
        print(f"making socket on port {port}: {e.strerror}", file=sys.stderr)
        sys.exit(2)
    return Server(sock, cfg.content_types)


def main(argv=None):
    p = argparse.ArgumentParser(prog="wsng", description="Forking HTTP/1.0 server")
    p.add_argument("-c", "--config", default=CONFIG_FILE, help="config file (default: %(default)s)")
    p.add_argument("--port", type=int, default=None, help="override the port from the config file")
    p.add_argument("--root", default=None, help="override server_root from the config file")
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(process)d %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    server = startup(args)
    server.install_signals()
    host = socket.gethostname()
    port = server.sock.getsockname()[1]
    log.info("%s%s started.  host=%s port=%d", SERVER_NAME.lower(), VERSION, host, port)
    server.serve_forever()


if __name__ == "__main__":
    main()
