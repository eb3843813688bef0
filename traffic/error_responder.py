"""
Minimal HTML error pages written straight to a client socket.
"""

import html
import logging
import socket

from config.settings import Settings
from core.errors     import ProxyError

logger = logging.getLogger("RelayProxy.Errors")


class ErrorResponder:
    """Format and send ``HTTP/1.0`` error responses."""

    @staticmethod
    def render(cause: str, code: int, short_msg: str,
               long_msg: str) -> bytes:
        body = (
            f"<html><title>Proxy Error</title>"
            f"<body bgcolor=\"ffffff\">\r\n"
            f"{code}: {html.escape(short_msg)}\r\n"
            f"<p>{html.escape(long_msg)}: {html.escape(cause)}\r\n"
            f"<hr><em>The {Settings.APP_NAME} Proxy Server</em>\r\n"
            f"</body></html>\r\n"
        ).encode("utf-8")
        head = (
            f"HTTP/1.0 {code} {short_msg}\r\n"
            f"Content-Type: text/html\r\n"
            f"Content-Length: {len(body)}\r\n"
            f"Connection: close\r\n"
            f"\r\n"
        ).encode("utf-8")
        return head + body

    @staticmethod
    def send(sock: socket.socket, cause: str, code: int,
             short_msg: str, long_msg: str):
        response = ErrorResponder.render(cause, code, short_msg, long_msg)
        try:
            sock.sendall(response)
        except OSError as exc:
            logger.debug("Could not deliver %d page: %s", code, exc)

    @staticmethod
    def send_error(sock: socket.socket, exc: ProxyError):
        ErrorResponder.send(
            sock, exc.cause, exc.status, exc.reason, exc.explanation
        )
