from .net import read_line, close_quietly

__all__ = ["read_line", "close_quietly"]
