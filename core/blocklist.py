"""
Host blocklist: loading and matching.

Two match policies are supported and one must be chosen explicitly:

* ``hostname``  – the decomposed hostname equals an entry
  (case-insensitive).  Default.
* ``substring`` – the raw request URI contains an entry
  (case-insensitive).

The entry tuple is built once and never mutated, so matching needs no
locking across relay threads.
"""

import logging

from .errors     import InvalidURI
from .uri_parser import parse_uri

logger = logging.getLogger("RelayProxy.Blocklist")

POLICY_HOSTNAME  = "hostname"
POLICY_SUBSTRING = "substring"
POLICIES = (POLICY_HOSTNAME, POLICY_SUBSTRING)


def load_blocklist(path: str) -> tuple[str, ...]:
    """
    Read one pattern per line.  Blank lines and ``#`` comments are
    skipped.  A missing file gives an empty blocklist.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except FileNotFoundError:
        logger.info("No blocklist at %s, running unrestricted", path)
        return ()

    entries = []
    for line in lines:
        entry = line.strip()
        if not entry or entry.startswith("#"):
            continue
        entries.append(entry)

    logger.info("Loaded %d blocklist entries from %s", len(entries), path)
    return tuple(entries)


class BlocklistMatcher:
    """Read-only lookup of request targets against blocklist entries."""

    def __init__(self, entries=(), policy: str = POLICY_HOSTNAME):
        if policy not in POLICIES:
            raise ValueError(f"Unknown blocklist policy: {policy}")
        self.policy  = policy
        self.entries = tuple(e.strip().lower() for e in entries if e.strip())

    def __len__(self):
        return len(self.entries)

    def is_blocked(self, uri: str) -> bool:
        if not self.entries:
            return False
        if self.policy == POLICY_SUBSTRING:
            return self._match_substring(uri)
        return self._match_hostname(uri)

    def _match_substring(self, uri: str) -> bool:
        uri_lower = uri.lower()
        return any(entry in uri_lower for entry in self.entries)

    def _match_hostname(self, uri: str) -> bool:
        try:
            hostname = parse_uri(uri).hostname.lower()
        except InvalidURI:
            # undecomposable URIs are rejected later with 400
            return False
        return hostname in self.entries
