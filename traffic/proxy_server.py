"""
RelayProxy connection dispatcher.

Accepts client connections and runs one ``Relay`` per connection,
either on its own daemon thread (concurrent mode, the default) or
inline on the accept loop (serial mode).

Browser Setup:
  - Set the HTTP proxy to <host>:<port>
  - Only plain ``http://`` GET and HEAD requests are forwarded
"""

import socket
import threading
import logging

from config.settings import Settings
from traffic.context import ProxyContext
from traffic.relay   import Relay, Transaction
from utils.net       import close_quietly

logger = logging.getLogger("RelayProxy.Server")


class ProxyServer:
    """
    Forwarding HTTP proxy.

    ``serve_forever()`` runs the accept loop in the calling thread;
    ``start()`` runs it on a background thread until ``stop()``.
    """

    def __init__(
        self,
        context: ProxyContext,
        host: str = Settings.PROXY_HOST,
        port: int = 0,
        concurrent: bool = True,
        backlog: int = Settings.LISTEN_BACKLOG,
    ):
        self.context    = context
        self.host       = host
        self.port       = port
        self.concurrent = concurrent
        self.backlog    = backlog

        self._server_sock: socket.socket | None = None
        self._running       = False
        self._accept_thread: threading.Thread | None = None
        self._lock          = threading.Lock()

        # Stats
        self.total_connections  = 0
        self.active_connections = 0
        self.relayed_requests   = 0
        self.blocked_requests   = 0
        self.failed_requests    = 0
        self.bytes_relayed      = 0

    # ── lifecycle ─────────────────────────────────────────────────

    def bind(self):
        """Bind and listen.  ``port`` is updated to the real port."""
        if self._server_sock is not None:
            return
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
            sock.listen(self.backlog)
        except OSError:
            sock.close()
            raise
        self._server_sock = sock
        self.port = sock.getsockname()[1]
        logger.info(
            "Proxy listening on %s:%d (mode=%s, blocklist=%d %s)",
            self.host, self.port, self.mode,
            len(self.context.blocklist), self.context.blocklist.policy,
        )

    def serve_forever(self):
        """Accept connections until the process is stopped."""
        self.bind()
        self._running = True
        try:
            self._accept_loop()
        finally:
            self._running = False
            close_quietly(self._server_sock)
            self._server_sock = None

    def start(self):
        """Bind, listen and accept on a background thread."""
        if self._running:
            logger.warning("Proxy already running")
            return

        self.bind()
        self._server_sock.settimeout(Settings.ACCEPT_POLL)
        self._running = True
        self._accept_thread = threading.Thread(
            target=self._accept_loop, daemon=True,
            name="ProxyAccept",
        )
        self._accept_thread.start()

    def stop(self):
        """Stop accepting.  Relays already running finish on their own."""
        self._running = False
        if self._accept_thread and self._accept_thread.is_alive():
            self._accept_thread.join(timeout=5)
        close_quietly(self._server_sock)
        self._server_sock = None
        logger.info("Proxy stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def mode(self) -> str:
        return "CONCURRENT" if self.concurrent else "SERIAL"

    # ── accept loop ───────────────────────────────────────────────

    def _accept_loop(self):
        while self._running:
            conn = self._accept_one()
            if conn is False:
                break
            if conn is not None:
                self._dispatch(*conn)

    def _accept_one(self):
        """
        Wait for one client.  Returns ``(sock, addr)``, ``None`` when the
        poll interval passed, or ``False`` once the listener is gone.
        """
        try:
            client_sock, addr = self._server_sock.accept()
        except socket.timeout:
            return None
        except OSError:
            if self._running:
                logger.error("Proxy accept error", exc_info=True)
            return False
        # relays block without a deadline, whatever the listener polls at
        client_sock.settimeout(None)
        return client_sock, addr

    def _dispatch(self, client_sock: socket.socket, addr: tuple):
        """Run the relay inline (serial) or on a detached thread."""
        if not self.concurrent:
            self._handle_client(client_sock, addr)
            return
        worker = threading.Thread(
            target=self._handle_client,
            args=(client_sock, addr),
            name=f"Relay-{addr[0]}:{addr[1]}",
        )
        worker.daemon = True
        worker.start()

    # ── per-client handler ────────────────────────────────────────

    def _handle_client(self, client_sock: socket.socket, addr: tuple):
        with self._lock:
            self.active_connections += 1
            self.total_connections += 1

        txn: Transaction | None = None
        try:
            txn = Relay(self.context, client_sock, addr).run()
        except Exception:
            logger.error("Relay for %s:%d crashed", *addr, exc_info=True)
        finally:
            close_quietly(client_sock)
            self._record(txn)

    def _record(self, txn: Transaction | None):
        with self._lock:
            self.active_connections -= 1
            if txn is None:
                self.failed_requests += 1
            elif txn.outcome == Transaction.RELAYED:
                self.relayed_requests += 1
                self.bytes_relayed += txn.bytes_relayed
            elif txn.outcome == Transaction.BLOCKED:
                self.blocked_requests += 1
            elif txn.outcome == Transaction.ERROR:
                self.failed_requests += 1

    def stats(self) -> dict:
        with self._lock:
            return {
                "running":            self._running,
                "listen":             f"{self.host}:{self.port}",
                "mode":               self.mode,
                "total_connections":  self.total_connections,
                "active_connections": self.active_connections,
                "relayed_requests":   self.relayed_requests,
                "blocked_requests":   self.blocked_requests,
                "failed_requests":    self.failed_requests,
                "bytes_relayed":      self.bytes_relayed,
                "blocklist_entries":  len(self.context.blocklist),
            }
