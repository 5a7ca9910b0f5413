"""Route log output line by line into an arbitrary sink, such as a test log."""

from __future__ import annotations

import logging
import sys
from typing import Callable

__all__ = ["PrefixedLineWriter", "new_logger"]

_LINE_FORMAT = "[%(levelname)s] %(message)s"
_STREAM_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


class PrefixedLineWriter:
    """A writable that hands each written line to ``sink``.

    One trailing newline is dropped, and a non-empty ``prefix`` is put in
    front of the line as ``"<prefix>: <line>"``.
    """

    def __init__(self, sink: Callable[[str], object], prefix: str = "") -> None:
        self.sink = sink
        self.prefix = prefix

    def write(self, data: str | bytes) -> int:
        """Pass ``data`` on to the sink and return the length of what was sent."""
        text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
        if text.endswith("\n"):
            text = text[:-1]
        if self.prefix:
            text = f"{self.prefix}: {text}"
        self.sink(text)
        return len(text)


class _WriterHandler(logging.Handler):
    def __init__(self, writer: PrefixedLineWriter) -> None:
        super().__init__()
        self._writer = writer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._writer.write(self.format(record) + "\n")
        except Exception:
            self.handleError(record)


def new_logger(prefix: str = "", sink: Callable[[str], object] | None = None) -> logging.Logger:
    """Return a logger named ``prefix``.

    With a ``sink``, every record goes to it as one line carrying the
    prefix; without one, records go straight to standard error.
    """
    logger = logging.Logger(prefix or "raftkit", level=logging.DEBUG)
    logger.propagate = False
    if sink is None:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_STREAM_FORMAT))
    else:
        handler = _WriterHandler(PrefixedLineWriter(sink, prefix))
        handler.setFormatter(logging.Formatter(_LINE_FORMAT))
    logger.addHandler(handler)
    return logger