#!/usr/bin/env python3
"""
Knowledge context cache.

The portfolio changes far less often than visitors chat, so the compiled
context is built once per process and reused until an admin invalidates it.
"""

import threading
from typing import Optional

from .context_compiler import ContextCompiler
from .records import RecordReader
from ..utils.logger import get_logger

logger = get_logger()


class ContextCache:
    """Lazily built, explicitly invalidated knowledge context."""

    def __init__(self, reader: RecordReader, compiler: ContextCompiler):
        self.reader = reader
        self.compiler = compiler
        self._lock = threading.Lock()
        self._context: Optional[str] = None

    @property
    def is_warm(self) -> bool:
        return self._context is not None

    def get_context(self) -> str:
        """
        Return the compiled knowledge context, building it if the cache is cold.

        Concurrent callers on a cold cache wait on the same lock, so records are
        read at most once per warm-up. A failed build leaves the cache cold.

        Raises:
            DataSourceError: if the records could not be read
        """
        context = self._context
        if context is not None:
            return context

        with self._lock:
            if self._context is not None:
                return self._context

            logger.info("[CACHE] Knowledge context is cold, building")
            records = self.reader.fetch_all_records()
            context = self.compiler.compile(records)

            self._context = context
            logger.info(f"[CACHE] Knowledge context ready, length: {len(context)}")
            return context

    def invalidate(self):
        """Drop the cached context; the next get_context() rebuilds it."""
        with self._lock:
            self._context = None
        logger.info("[CACHE] Knowledge context invalidated")
