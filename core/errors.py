"""
Per-transaction error taxonomy.

Every error carries the HTTP status the client should see.  They are
raised inside a relay and converted to an error page there; none of
them ever escapes a transaction.
"""


class ProxyError(Exception):
    """Base class for errors reported to the client as a status page."""

    status      = 500
    reason      = "Internal Server Error"
    explanation = "The proxy could not complete the request"

    def __init__(self, cause: str = ""):
        super().__init__(cause)
        self.cause = cause


class UnsupportedMethod(ProxyError):
    status      = 501
    reason      = "Not Implemented"
    explanation = "This method is not implemented by the proxy"


class Blocked(ProxyError):
    status      = 403
    reason      = "Forbidden"
    explanation = "This site is blocked by the proxy"


class BadRequest(ProxyError):
    status      = 400
    reason      = "Bad Request"
    explanation = "Proxy cannot parse the request"


class InvalidURI(BadRequest):
    pass


class OriginUnreachable(ProxyError):
    status      = 404
    reason      = "Not Found"
    explanation = "Cannot connect to the host"
