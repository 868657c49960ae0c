"""wsng — a small forking HTTP/1.0 server for static files, listings and CGI."""

SERVER_NAME = "WSNG"
VERSION = "1"
SERVER_TAG = f"{SERVER_NAME}/{VERSION}"
CONTENT_DEFAULT = "text/plain"

__version__ = VERSION
