"""
Absolute-URI decomposition for proxy requests.

    http://host[:port][/path]  ->  ParsedTarget(host, port, path)

Nothing is decoded or normalised: the path is forwarded exactly as the
client wrote it.
"""

import re
from dataclasses import dataclass

from .errors import InvalidURI

SCHEME       = "http://"
DEFAULT_PORT = 80
DEFAULT_PATH = "/"

_HOST_END = re.compile(r"[ :/\r\n]")
_DIGITS   = re.compile(r"\d+")


@dataclass(frozen=True)
class ParsedTarget:
    hostname: str
    port:     int = DEFAULT_PORT
    path:     str = DEFAULT_PATH

    @property
    def address(self) -> tuple[str, int]:
        return self.hostname, self.port


def _leading_int(text: str) -> int:
    """Parse leading decimal digits; no digits gives 0."""
    m = _DIGITS.match(text)
    return int(m.group()) if m else 0


def parse_uri(uri: str) -> ParsedTarget:
    """
    Split an ``http://`` URI into hostname, port and path.

    Raises ``InvalidURI`` when the scheme prefix is missing or the
    hostname is empty.  A ``:`` after the hostname is followed by the
    port digits; anything that is not a number there yields port 0,
    which is passed on untouched.
    """
    if uri[:len(SCHEME)].lower() != SCHEME:
        raise InvalidURI(uri)

    rest = uri[len(SCHEME):]
    m = _HOST_END.search(rest)
    host_end = m.start() if m else len(rest)
    hostname = rest[:host_end]
    if not hostname:
        raise InvalidURI(uri)

    port = DEFAULT_PORT
    if m and m.group() == ":":
        port = _leading_int(rest[host_end + 1:])

    slash = rest.find("/", host_end)
    path = rest[slash:] if slash != -1 else DEFAULT_PATH

    return ParsedTarget(hostname, port, path)
