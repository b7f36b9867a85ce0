"""
Logging style constants for consistent visual hierarchy.

Provides the separators, symbols and key/value formatting shared by the
orchestrator, the epoch runner and the CLI.
"""

from __future__ import annotations

import logging


class LogStyle:
    """Unified logging style constants for consistent visual hierarchy."""

    # Header centering width (matches separator length)
    HEADER_WIDTH = 72

    # Level 1: Run headers
    HEAVY = "━" * HEADER_WIDTH

    # Level 2: Epoch sections
    DOUBLE = "═" * HEADER_WIDTH

    # Level 3: Separators
    LIGHT = "─" * HEADER_WIDTH

    # Symbols
    ARROW = "»"
    BULLET = "•"
    WARNING = "⚠"
    SUCCESS = "✓"

    # Indentation
    INDENT = "  "
    DOUBLE_INDENT = "    "

    # ANSI Colors (applied by ColorFormatter to console output only)
    RESET = "\033[0m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    MAGENTA = "\033[35m"

    @staticmethod
    def kv(key: str, value: object) -> str:
        """Format an indented ``» key : value`` line."""
        return f"{LogStyle.INDENT}{LogStyle.ARROW} {key:<16}: {value}"

    @staticmethod
    def log_phase_header(
        log: logging.Logger,
        title: str,
        style: str | None = None,
    ) -> None:
        """
        Log a centered phase header with separator lines.

        Args:
            log: Logger instance to write to.
            title: Header text (centered).
            style: Separator string (defaults to ``LogStyle.HEAVY``).
        """
        sep = style if style is not None else LogStyle.HEAVY
        log.info("")
        log.info(sep)
        log.info(f"{title:^{LogStyle.HEADER_WIDTH}}")
        log.info(sep)
