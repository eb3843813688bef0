from .errors       import (ProxyError, UnsupportedMethod, Blocked,
                           BadRequest, InvalidURI, OriginUnreachable)
from .uri_parser   import ParsedTarget, parse_uri
from .http_request import Request, build_origin_request
from .blocklist    import BlocklistMatcher, load_blocklist

__all__ = [
    "ProxyError", "UnsupportedMethod", "Blocked", "BadRequest",
    "InvalidURI", "OriginUnreachable",
    "ParsedTarget", "parse_uri",
    "Request", "build_origin_request",
    "BlocklistMatcher", "load_blocklist",
]
