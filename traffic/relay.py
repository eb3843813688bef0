"""
One proxied HTTP transaction, from request line to audit entry.

Steps, stopping at the first failure:

  1. read the request line          (EOF -> return silently)
  2. parse it, check the method     (501 unless GET/HEAD)
  3. consult the blocklist          (403)
  4. decompose the target URI       (400)
  5. connect to the origin          (404)
  6. send the HTTP/1.0 rewrite
  7. stream the response back, counting bytes
  8. append the audit entry
  9. close the origin socket

The client socket belongs to the dispatcher, which closes it after
``Relay.run`` returns.
"""

import logging
import socket

from core.errors       import ProxyError, Blocked, BadRequest, OriginUnreachable
from core.http_request import Request, build_origin_request
from core.uri_parser   import ParsedTarget, parse_uri
from traffic.audit_log import LogEntry
from traffic.context   import ProxyContext
from traffic.error_responder import ErrorResponder
from utils.net         import read_line, close_quietly

logger = logging.getLogger("RelayProxy.Relay")


class Transaction:
    """Outcome of one connection, reported back to the dispatcher."""

    CLOSED  = "closed"       # client left before sending a request
    RELAYED = "relayed"
    BLOCKED = "blocked"
    ERROR   = "error"

    def __init__(self, client_addr: tuple):
        self.client_addr   = client_addr
        self.method        = ""
        self.uri           = ""
        self.status: int | None = None
        self.bytes_relayed = 0
        self.outcome       = Transaction.CLOSED

    @property
    def client_ip(self) -> str:
        return self.client_addr[0] if self.client_addr else ""


class Relay:
    def __init__(self, context: ProxyContext,
                 client_sock: socket.socket, client_addr: tuple):
        self.context     = context
        self.client_sock = client_sock
        self.transaction = Transaction(client_addr)

    def run(self) -> Transaction:
        txn = self.transaction
        try:
            line = self._read_request()
            if line is None:
                return txn

            request = Request.parse(line)
            txn.method, txn.uri = request.method, request.uri
            request.require_supported_method()

            if self.context.blocklist.is_blocked(request.uri):
                raise Blocked(request.uri)

            target = parse_uri(request.uri)
            origin = self._connect(target)
        except ProxyError as exc:
            self._fail(exc)
            return txn

        try:
            logger.info("%s %s from %s", request.method, request.uri,
                        txn.client_ip)
            if self._forward(origin, request, target):
                txn.bytes_relayed = self._relay_response(origin)
        finally:
            close_quietly(origin)

        txn.outcome = Transaction.RELAYED
        self.context.audit_log.append(
            LogEntry(txn.client_ip, request.uri, txn.bytes_relayed)
        )
        return txn

    # ── step 1: request line ───────────────────────────────────────

    def _read_request(self) -> str | None:
        limit = self.context.max_line
        try:
            with self.client_sock.makefile("rb") as reader:
                raw, complete = read_line(reader, limit)
                if not raw:
                    return None
                if not complete:
                    self._discard_line(reader, limit)
                self._discard_headers(reader, limit)
        except OSError as exc:
            logger.debug("Client %s went away: %s",
                         self.transaction.client_ip, exc)
            return None
        if not complete:
            raise BadRequest("request line too long")
        return raw.decode("iso-8859-1")

    def _discard_line(self, reader, limit: int):
        for _ in range(self.context.max_header_lines):
            raw, _complete = read_line(reader, limit)
            if not raw or raw.endswith(b"\n"):
                return

    def _discard_headers(self, reader, limit: int):
        # Only Host and User-Agent are sent upstream; the rest is dropped.
        for _ in range(self.context.max_header_lines):
            raw, _complete = read_line(reader, limit)
            if raw in (b"", b"\r\n", b"\n"):
                return

    # ── step 5: origin connection ──────────────────────────────────

    def _connect(self, target: ParsedTarget) -> socket.socket:
        try:
            return socket.create_connection(target.address)
        except (OSError, OverflowError, ValueError) as exc:
            logger.warning("Cannot reach %s:%d - %s",
                           target.hostname, target.port, exc)
            raise OriginUnreachable(target.hostname) from exc

    # ── step 6: forward ────────────────────────────────────────────

    def _forward(self, origin: socket.socket, request: Request,
                 target: ParsedTarget) -> bool:
        payload = build_origin_request(request, target,
                                       self.context.user_agent)
        try:
            origin.sendall(payload)
        except OSError as exc:
            logger.warning("Forward to %s:%d failed: %s",
                           target.hostname, target.port, exc)
            return False
        return True

    # ── step 7: response ───────────────────────────────────────────

    def _relay_response(self, origin: socket.socket) -> int:
        """Copy the origin's reply to the client until either side stops."""
        total = 0
        with origin.makefile("rb") as reader:
            while True:
                try:
                    chunk = reader.readline(self.context.max_line)
                except OSError as exc:
                    logger.debug("Origin read error: %s", exc)
                    break
                if not chunk:
                    break
                try:
                    self.client_sock.sendall(chunk)
                except OSError as exc:
                    logger.debug("Client write error: %s", exc)
                    break
                total += len(chunk)
        return total

    # ── failures ───────────────────────────────────────────────────

    def _fail(self, exc: ProxyError):
        txn = self.transaction
        txn.status = exc.status
        if isinstance(exc, Blocked):
            txn.outcome = Transaction.BLOCKED
            logger.warning("Blocked %s from %s", exc.cause, txn.client_ip)
        else:
            txn.outcome = Transaction.ERROR
            logger.info("%d %s for %s from %s", exc.status, exc.reason,
                        exc.cause or "-", txn.client_ip)
        ErrorResponder.send_error(self.client_sock, exc)
