"""
Small socket helpers shared by the relay and the dispatcher.
"""

import socket


def read_line(reader, limit: int) -> tuple[bytes, bool]:
    """
    Read one line of at most *limit* bytes from a buffered socket file.

    Returns ``(line, complete)`` where *complete* is False when the limit
    was hit before a newline.  An empty line means end of stream.
    """
    line = reader.readline(limit)
    complete = line.endswith(b"\n") or len(line) < limit
    return line, complete


def close_quietly(sock: socket.socket | None):
    if sock is None:
        return
    try:
        sock.close()
    except OSError:
        pass
