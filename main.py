"""
RelayProxy: Main Entry Point

    python main.py PORT [--blocklist FILE] [--log-file FILE] [--serial]

Startup order
─────────────
1. Parse arguments (bad usage exits non-zero)
2. Open the audit log (failure is fatal)
3. Load the blocklist (a missing file means no blocking)
4. Bind and run the accept loop until interrupted
"""

import sys
import logging
import argparse

from config.settings import Settings
from core.blocklist  import BlocklistMatcher, load_blocklist, POLICIES
from traffic         import AuditLog, ProxyContext, ProxyServer


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="relayproxy",
        description=f"{Settings.APP_NAME} forwarding HTTP proxy",
    )
    parser.add_argument("port", type=int, help="Port to listen on")
    parser.add_argument("--host", default=Settings.PROXY_HOST,
                        help="Interface to listen on")
    parser.add_argument("--blocklist", default=Settings.BLOCKLIST_FILE,
                        help="File with one blocked host per line")
    parser.add_argument("--log-file", default=Settings.LOG_FILE,
                        help="Audit log (appended to)")
    parser.add_argument("--match-policy", choices=POLICIES,
                        default=Settings.BLOCKLIST_POLICY,
                        help="Compare entries to the hostname or the raw URI")
    parser.add_argument("--serial", action="store_true",
                        help="Handle one connection at a time")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging")
    return parser.parse_args(argv)


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else getattr(logging, Settings.LOG_LEVEL)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        "[%(asctime)s] [%(levelname)-8s] %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    ))
    root_logger.addHandler(console_handler)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger("RelayProxy.Main")

    try:
        audit_log = AuditLog(args.log_file)
    except OSError as exc:
        print(f"Error opening log file {args.log_file}: {exc}",
              file=sys.stderr)
        return 1

    context = ProxyContext(
        audit_log=audit_log,
        blocklist=BlocklistMatcher(load_blocklist(args.blocklist),
                                   policy=args.match_policy),
    )
    server = ProxyServer(context, host=args.host, port=args.port,
                         concurrent=not args.serial)

    logger.info("%s v%s started", Settings.APP_NAME, Settings.APP_VERSION)
    try:
        server.serve_forever()
    except OSError as exc:
        print(f"Cannot listen on {args.host}:{args.port}: {exc}",
              file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down…")
    finally:
        context.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
