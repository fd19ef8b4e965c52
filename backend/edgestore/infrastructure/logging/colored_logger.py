"""Colored operation logger — ANSI-colored console logging for store maintenance.

Provides an OperationLogger with color-coded output per maintenance stage,
making it easy to follow eviction, backup and migration runs in the terminal.

Color scheme:
    🟢 Green   — Export / completion
    🟡 Yellow  — Eviction
    🟣 Magenta — Import / restore
    🔵 Blue    — Backup validation
    🟠 Cyan    — Legacy migration / retention
    🔴 Red     — Errors
    ⚪ Gray    — Timing / Stats
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Stage Definitions ────────────────────────────────────────────────

class OperationStage:
    """Predefined maintenance stages with colors and icons."""

    EXPORT = ("EXPORT", _Colors.GREEN, "📦")
    VALIDATE = ("VALIDATE", _Colors.BLUE, "🔎")
    IMPORT = ("IMPORT", _Colors.MAGENTA, "📥")
    EVICTION = ("EVICT", _Colors.YELLOW, "🧹")
    MIGRATION = ("MIGRATE", _Colors.CYAN, "🔀")
    RETENTION = ("RETENTION", _Colors.CYAN, "🗓️")
    STORE = ("STORE", _Colors.WHITE, "💾")
    ERROR = ("ERROR", _Colors.RED, "❌")
    COMPLETE = ("COMPLETE", _Colors.GREEN, "✅")


def _with_details(formatted: str, fields: dict[str, Any], tone: str = _Colors.GRAY) -> str:
    """Append ``key=value`` pairs, if any, in a muted tone."""
    if not fields:
        return formatted
    details = " | ".join(f"{k}={v}" for k, v in fields.items())
    return f"{formatted} {tone}({details}){_Colors.RESET}"


# ── OperationLogger ──────────────────────────────────────────────────

class OperationLogger:
    """Color-coded logger for store maintenance operations.

    Usage:
        log = OperationLogger("EvictionPolicy")
        log.step_start(OperationStage.EVICTION, "Freeing space", needed=2048)
        log.detail("contacts: removed 3")
        log.step_complete(OperationStage.EVICTION, "Freed 4096 bytes")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)
        self._component = component_name

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the start of a step with its stage color."""
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        self._logger.info(_with_details(formatted, kwargs))

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the successful completion of a step."""
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        self._logger.info(_with_details(formatted, kwargs))

    def step_warning(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log a step that finished without reaching its goal."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.YELLOW}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.YELLOW}⚠ {message}{_Colors.RESET}"
        )
        self._logger.warning(_with_details(formatted, kwargs))

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a step error in red."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail (gray/dimmed)."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        self._logger.info(_with_details(formatted, kwargs, tone=_Colors.DIM))

    def stats(self, **kwargs: Any) -> None:
        """Log statistics / sizes."""
        parts = [f"{_Colors.GRAY}{k}: {v}" for k, v in kwargs.items()]
        formatted = f"   {_Colors.GRAY}📈 {' | '.join(parts)}{_Colors.RESET}"
        self._logger.info(formatted)

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Usage:
            with log.timed_step(OperationStage.IMPORT, "Merging backup"):
                backup.import_merge(payload)
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed:.3f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed:.3f}s")
