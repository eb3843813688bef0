"""
Process-scoped state handed to every relay.
"""

from config.settings  import Settings
from core.blocklist   import BlocklistMatcher
from traffic.audit_log import AuditLog


class ProxyContext:
    """
    Everything a relay shares with its siblings.

    Built once at startup and passed by reference.  The blocklist is
    read-only; the audit log does its own locking.
    """

    def __init__(
        self,
        audit_log: AuditLog,
        blocklist: BlocklistMatcher | None = None,
        user_agent: str = Settings.USER_AGENT,
        max_line: int = Settings.MAX_LINE,
        max_header_lines: int = Settings.MAX_HEADER_LINES,
    ):
        self.audit_log        = audit_log
        self.blocklist        = blocklist or BlocklistMatcher()
        self.user_agent       = user_agent
        self.max_line         = max_line
        self.max_header_lines = max_header_lines

    def close(self):
        self.audit_log.close()
