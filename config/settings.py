import os


class Settings:
    """Centralised application configuration."""

    # ── application ──────────────────────────────────────────────
    APP_NAME    = "RelayProxy"
    APP_VERSION = "1.0.0"

    # ── paths ────────────────────────────────────────────────────
    LOG_FILE       = os.environ.get("RELAYPROXY_LOG_FILE", "proxy.log")
    BLOCKLIST_FILE = os.environ.get("RELAYPROXY_BLOCKLIST", "blocklist.txt")

    # ── network ──────────────────────────────────────────────────
    PROXY_HOST     = "0.0.0.0"
    LISTEN_BACKLOG = 100
    ACCEPT_POLL    = 1.0         # seconds, only for start()/stop()

    # ── http ─────────────────────────────────────────────────────
    MAX_LINE         = 8192      # bytes per request/response line
    MAX_HEADER_LINES = 100
    USER_AGENT = (
        "Mozilla/5.0 (X11; Linux x86_64; rv:10.0.3) "
        "Gecko/20120305 Firefox/10.0.3"
    )

    # ── blocklist ────────────────────────────────────────────────
    BLOCKLIST_POLICY = "hostname"    # or "substring"

    # ── logging ──────────────────────────────────────────────────
    LOG_LEVEL       = "INFO"
    AUDIT_TIME_FMT  = "%a %d %b %Y %H:%M:%S %Z"
