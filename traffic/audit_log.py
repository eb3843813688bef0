"""
Append-only audit log of completed transactions.

One line per relayed request:

    [<local timestamp>] <client-ip> <original uri> <bytes>

Relay threads share one ``AuditLog``; a lock around write+flush keeps
every line whole.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime

from config.settings import Settings

logger = logging.getLogger("RelayProxy.AuditLog")


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class LogEntry:
    client_ip: str
    uri:       str
    size:      int
    timestamp: datetime = field(default_factory=_now)

    def format(self) -> str:
        ts = self.timestamp.strftime(Settings.AUDIT_TIME_FMT).rstrip()
        return f"[{ts}] {self.client_ip} {self.uri} {self.size}"


class AuditLog:
    """
    Serialises log writes from concurrently running relays.

    The file is opened at construction; an ``OSError`` there is meant to
    stop the process before it accepts any connection.
    """

    def __init__(self, path: str = Settings.LOG_FILE):
        self.path  = path
        # latin-1 round-trips the request bytes exactly
        self._file = open(path, "a", encoding="iso-8859-1",
                          errors="replace")
        self._lock = threading.Lock()
        self.entries_written = 0
        logger.info("Audit log opened at %s", path)

    def append(self, entry: LogEntry):
        line = entry.format() + "\n"
        with self._lock:
            if self._file.closed:
                logger.warning("Audit log closed, dropping: %s", line.rstrip())
                return
            self._file.write(line)
            self._file.flush()
            self.entries_written += 1

    def close(self):
        with self._lock:
            if not self._file.closed:
                self._file.close()
                logger.info("Audit log closed (%d entries)",
                            self.entries_written)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
