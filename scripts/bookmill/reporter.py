"""
Console reporting, scoped to one Book.

Keeps the indented console style of the build scripts (`  Warning: ...`,
`  ✗ ...`, `  ✓ ...`) but filters by verbosity, and is safe to call from
the render threads.
"""

import sys
import threading
from enum import IntEnum


class InfoLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    QUIET = 4


class Reporter:
    """
    Prints progress, warnings and errors for a single book.

    Usage:
        reporter = Reporter(InfoLevel.INFO)
        reporter.warning("chapter is above the book directory")
    """

    def __init__(self, verbosity=InfoLevel.WARNING, stream=None):
        self.verbosity = InfoLevel(verbosity)
        self._stream = stream
        self._lock = threading.Lock()

    def set_verbosity(self, verbosity):
        self.verbosity = InfoLevel(verbosity)

    # ── Levels ─────────────────────────────────────────────

    def debug(self, msg):
        self._emit(InfoLevel.DEBUG, f"  {msg}")

    def info(self, msg):
        self._emit(InfoLevel.INFO, f"  {msg}")

    def success(self, msg):
        self._emit(InfoLevel.INFO, f"  ✓ {msg}")

    def warning(self, msg):
        self._emit(InfoLevel.WARNING, f"  Warning: {msg}")

    def error(self, msg):
        self._emit(InfoLevel.ERROR, f"  ✗ {msg}")

    def _emit(self, level, text):
        if level < self.verbosity:
            return
        with self._lock:
            print(text, file=self._stream or sys.stdout)
