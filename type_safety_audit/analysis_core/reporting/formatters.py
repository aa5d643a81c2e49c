"""Terminal output formatters with color and emoji support."""
from __future__ import annotations

import logging
import os
import sys

from type_safety_audit.analysis_core.config import SEVERITY_ERROR, SEVERITY_WARNING


class Colors:
    """ANSI color codes for terminal output."""

    RED = "\033[31m"
    YELLOW = "\033[33m"
    GREEN = "\033[32m"
    BLUE = "\033[34m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    _enabled = True

    @classmethod
    def disable(cls) -> None:
        cls._enabled = False

    @classmethod
    def enable(cls) -> None:
        cls._enabled = True

    @classmethod
    def colorize(cls, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if not cls._enabled or not color:
            return text
        return f"{color}{text}{cls.RESET}"

    @classmethod
    def supports_color(cls) -> bool:
        """Check if the terminal supports color output."""
        # Respect NO_COLOR environment variable (https://no-color.org/)
        if os.environ.get("NO_COLOR"):
            return False
        return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


class Emojis:
    """Emoji markers for console findings."""

    ERROR = "🚨"
    WARNING = "⚠️"
    INFO = "ℹ️"
    CLEAN = "✅"

    _enabled = True

    @classmethod
    def disable(cls) -> None:
        cls._enabled = False

    @classmethod
    def enable(cls) -> None:
        cls._enabled = True

    @classmethod
    def get(cls, emoji: str) -> str:
        """Return emoji if enabled, empty string otherwise."""
        return emoji if cls._enabled else ""


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI color support."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.RED + Colors.BOLD,
    }

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if Colors._enabled:
            record.levelname = Colors.colorize(levelname, self.LEVEL_COLORS.get(record.levelno, ""))
        result = super().format(record)
        record.levelname = levelname
        return result


def severity_color(severity: str) -> str:
    if severity == SEVERITY_ERROR:
        return Colors.RED + Colors.BOLD
    if severity == SEVERITY_WARNING:
        return Colors.YELLOW
    return Colors.BLUE


def severity_emoji(severity: str) -> str:
    if severity == SEVERITY_ERROR:
        return Emojis.get(Emojis.ERROR)
    if severity == SEVERITY_WARNING:
        return Emojis.get(Emojis.WARNING)
    return Emojis.get(Emojis.INFO)
