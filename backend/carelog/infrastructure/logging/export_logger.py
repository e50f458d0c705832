"""Colored export logger — ANSI-colored console logging for report exports.

Each export run walks through the same stages; coloring them makes a long
export easy to follow in the terminal.

Color scheme:
    Cyan    — Filter resolution
    Yellow  — Lookup maps
    Blue    — Batches
    Red     — Errors
    Green   — Completion
    Gray    — Details / stats
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


class ExportStage:
    """Predefined export stages: (label, color)."""

    FILTERS = ("FILTERS", _Colors.CYAN)
    LOOKUPS = ("LOOKUPS", _Colors.YELLOW)
    BATCH = ("BATCH", _Colors.BLUE)
    EXPORT = ("EXPORT", _Colors.WHITE)
    ERROR = ("ERROR", _Colors.RED)
    COMPLETE = ("COMPLETE", _Colors.GREEN)


def _format_details(kwargs: dict[str, Any]) -> str:
    if not kwargs:
        return ""
    details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {_Colors.GRAY}({details}){_Colors.RESET}"


class ExportLogger:
    """Color-coded logger for export runs.

    Usage:
        log = ExportLogger()
        with log.timed_step(ExportStage.LOOKUPS, "Building lookup maps"):
            names = await repo.get_name_map()
        log.detail("Batch written", rows=1000)
    """

    def __init__(self, component_name: str = "ExportPipeline"):
        self._logger = logging.getLogger(component_name)

    def step_start(self, stage: tuple[str, str], message: str, **kwargs: Any) -> None:
        label, color = stage
        self._logger.info(
            f"{color}{_Colors.BOLD}[{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}{_format_details(kwargs)}"
        )

    def step_complete(self, stage: tuple[str, str], message: str, **kwargs: Any) -> None:
        label, color = stage
        self._logger.info(
            f"{color}[{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}{_format_details(kwargs)}"
        )

    def step_error(
        self, stage: tuple[str, str], message: str, error: Exception | None = None
    ) -> None:
        label, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}[{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        self._logger.info(
            f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}{_format_details(kwargs)}"
        )

    def stats(self, **kwargs: Any) -> None:
        parts = [f"{k}: {v}" for k, v in kwargs.items()]
        self._logger.info(f"   {_Colors.GRAY}{' | '.join(parts)}{_Colors.RESET}")

    @contextmanager
    def timed_step(self, stage: tuple[str, str], message: str, **kwargs: Any):
        """Log start and end of a step with its elapsed time."""
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed:.2f}s", **kwargs)
