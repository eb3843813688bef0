"""
RelayProxy traffic layer.
"""

from .audit_log       import AuditLog, LogEntry
from .context         import ProxyContext
from .error_responder import ErrorResponder
from .relay           import Relay, Transaction
from .proxy_server    import ProxyServer

__all__ = [
    "AuditLog",
    "LogEntry",
    "ProxyContext",
    "ErrorResponder",
    "Relay",
    "Transaction",
    "ProxyServer",
]
