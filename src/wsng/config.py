"""
config.py — server settings and the extension -> Content-Type table.

The config file is line oriented:

    # comment
    server_root /srv/www
    port 8080
    type html text/html

Lines that start with '#' and lines that do not hold 2 or 3 tokens are
skipped. A `type` line needs exactly 3 tokens.
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

log = logging.getLogger(__name__)

CONFIG_FILE = "wsng.conf"
SERVER_ROOT = "."
PORTNUM = 80


class ConfigError(Exception):
    """Raised when the config file cannot be used to start the server."""


class ContentTypes:
    """Read-only mapping of file extension (no dot) to MIME type."""

    def __init__(self, mapping: Optional[Mapping[str, str]] = None):
        self._table = MappingProxyType(dict(mapping or {}))

    def lookup(self, ext: str) -> str:
        """Return the content type for `ext`, or "" when unknown."""
        return self._table.get(ext, "")

    def __len__(self):
        return len(self._table)

    def __contains__(self, ext):
        return ext in self._table


@dataclass
class ServerConfig:
    root: str = SERVER_ROOT
    port: int = PORTNUM
    content_types: ContentTypes = field(default_factory=ContentTypes)


def read_params(lines):
    """Yield the token lists of the usable lines in `lines`."""
    for line in lines:
        tokens = line.split()
        if len(tokens) not in (2, 3) or tokens[0].startswith("#"):
            continue
        yield tokens


def parse_config(lines) -> ServerConfig:
    cfg = ServerConfig()
    types = {}
    for tokens in read_params(lines):
        name, value = tokens[0].lower(), tokens[1]
        if name == "server_root":
            cfg.root = value
        elif name == "port":
            try:
                cfg.port = int(value)
            except ValueError:
                raise ConfigError(f"bad port value {value!r}") from None
        elif name == "type":
            if len(tokens) != 3:
                log.warning('No type specified for "%s"', value)
                continue
            types[value] = tokens[2]
    cfg.content_types = ContentTypes(types)
    return cfg


def load_config(path=CONFIG_FILE) -> ServerConfig:
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return parse_config(f)
    except OSError as e:
        raise ConfigError(f"Cannot open config file {path}: {e.strerror}") from e
