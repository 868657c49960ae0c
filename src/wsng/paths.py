"""Request-target cleanup and filesystem classification."""
import enum
import os
import stat


class FsEntryKind(enum.Enum):
    MISSING = "missing"
    FORBIDDEN = "forbidden"
    DIRECTORY = "directory"
    CGI = "cgi"
    REGULAR = "regular"


def sanitize(raw: str) -> str:
    """Remove ".." segments from `raw` so it can never climb above the root.

    A ".." cancels the segment before it, if any, and is dropped either way.
    Empty segments vanish. An empty result becomes "." (the server root).
    Percent-encoded dots and symlinks are not looked at.
    """
    parts = []
    for seg in raw.split("/"):
        if seg == "..":
            if parts:
                parts.pop()
        elif seg:
            parts.append(seg)
    return "/".join(parts) or "."


def split_query(path: str):
    """Split `path` at its last '?' into (path, query). query is None if absent."""
    head, sep, query = path.rpartition("?")
    if not sep:
        return path, None
    return head, query


def file_type(path: str) -> str:
    """Extension of the last path component, without the dot."""
    return os.path.splitext(os.path.basename(path))[1][1:]


def ends_in_cgi(path: str) -> bool:
    return file_type(path) == "cgi"


def no_access(info: os.stat_result) -> bool:
    # owner bits of the target itself; directories must also be searchable
    if not info.st_mode & stat.S_IRUSR:
        return True
    return stat.S_ISDIR(info.st_mode) and not info.st_mode & stat.S_IXUSR


def classify(path: str) -> FsEntryKind:
    try:
        info = os.stat(path)
    except (OSError, ValueError):
        return FsEntryKind.MISSING
    if no_access(info):
        return FsEntryKind.FORBIDDEN
    if stat.S_ISDIR(info.st_mode):
        return FsEntryKind.DIRECTORY
    if ends_in_cgi(path):
        return FsEntryKind.CGI
    return FsEntryKind.REGULAR
