import io
import os
import stat

import pytest

from wsng.client import parse_response
from wsng.config import ContentTypes
from wsng.dispatch import dispatch

TYPES = ContentTypes({"html": "text/html", "txt": "text/plain", "png": "image/png"})


@pytest.fixture
def www(tmp_path, monkeypatch):
    """An empty server root, made the current directory."""
    root = tmp_path / "www"
    root.mkdir()
    monkeypatch.chdir(root)
    yield root
    # put permissions back so tmp_path can be cleaned up
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            p = os.path.join(dirpath, name)
            if not os.path.islink(p):
                os.chmod(p, os.stat(p).st_mode | stat.S_IRWXU)


@pytest.fixture
def get():
    """Dispatch one request line and return (code, headers, body)."""
    def _get(line, types=TYPES):
        out = io.BytesIO()
        dispatch(line, out, types)
        return parse_response(out.getvalue())
    return _get


@pytest.fixture
def cgi_script():
    """Write an executable /bin/sh CGI program."""
    def _write(path, body):
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(0o755)
        return path
    return _write
