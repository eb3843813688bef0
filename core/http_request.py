"""
Request-line parsing and origin request construction.
"""

from dataclasses import dataclass

from .errors     import BadRequest, UnsupportedMethod
from .uri_parser import ParsedTarget

ALLOWED_METHODS = ("GET", "HEAD")
ORIGIN_VERSION  = "HTTP/1.0"


@dataclass(frozen=True)
class Request:
    method:  str
    uri:     str
    version: str = ""

    @classmethod
    def parse(cls, line: str) -> "Request":
        """Split a request line on whitespace.  Missing fields are empty."""
        parts = line.split()
        if not parts:
            raise BadRequest("empty request line")
        method  = parts[0]
        uri     = parts[1] if len(parts) > 1 else ""
        version = parts[2] if len(parts) > 2 else ""
        return cls(method, uri, version)

    def require_supported_method(self):
        if self.method.upper() not in ALLOWED_METHODS:
            raise UnsupportedMethod(self.method)


def build_origin_request(request: Request, target: ParsedTarget,
                         user_agent: str) -> bytes:
    """
    Rebuild the request for the origin as HTTP/1.0.

    Client headers are not carried over; only Host and User-Agent are
    sent, plus the close directives.
    """
    lines = [
        f"{request.method} {target.path} {ORIGIN_VERSION}",
        f"Host: {target.hostname}",
        f"User-Agent: {user_agent}",
        "Connection: close",
        "Proxy-Connection: close",
        "",
        "",
    ]
    return "\r\n".join(lines).encode("iso-8859-1")
