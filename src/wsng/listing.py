"""HTML table listing of a directory."""
import html
import logging
import os
import stat
import urllib.parse
from dataclasses import dataclass

from .webtime import table_time

log = logging.getLogger(__name__)

TABLE_HEADER = ("<table>\n<tbody>\n<tr>"
                "<th>Name</th><th>Last Modified</th><th>Size</th>"
                "</tr>\n")
TABLE_CLOSE = "</tbody></table>\n"


@dataclass(frozen=True)
class DirectoryRow:
    name: str
    is_dir: bool
    mtime_display: str
    size_bytes: int

    def render(self):
        name = self.name + ("/" if self.is_dir else "")
        href = urllib.parse.quote(name, errors="surrogateescape")
        label = html.escape(name)
        return (f"<tr><td><a href='{href}'>{label}</a></td>"
                f"<td>{self.mtime_display}</td>"
                f"<td>{self.size_bytes}</td></tr>\n")


def read_rows(dirpath):
    """Yield a DirectoryRow per entry of `dirpath`, "." and ".." included.

    Entries that cannot be lstat'ed are logged and left out.
    Raises OSError if the directory itself cannot be read.
    """
    names = [os.curdir, os.pardir] + os.listdir(dirpath)
    for name in names:
        path = os.path.join(dirpath, name)
        try:
            info = os.lstat(path)
        except OSError as e:
            log.warning("error with %s: %s", path, e.strerror)
            continue
        yield DirectoryRow(name, stat.S_ISDIR(info.st_mode),
                           table_time(info.st_mtime), info.st_size)


def list_directory(dirpath, out):
    """Write the listing table for `dirpath` to the binary stream `out`."""
    try:
        rows = list(read_rows(dirpath))
    except OSError as e:
        log.error("Couldn't open directory %s: %s", dirpath, e.strerror)
        return
    body = TABLE_HEADER + "".join(row.render() for row in rows) + TABLE_CLOSE
    out.write(body.encode("utf-8", "surrogateescape"))
