from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler


class LogConfig:
    """Centralized logging setup for the CLI.

    Logging levels:
    - Default: WARNING and up, user-facing output goes through Rich directly
    - --verbose: INFO level for meshctl loggers
    - --debug: DEBUG to the console and a rotating log file
    """

    NOISY_LOGGERS: tuple[str, ...] = (
        "httpx",
        "httpcore",
        "urllib3",
    )

    LOG_FILE_NAME = "meshctl.debug.log"

    @classmethod
    def configure(cls, *, verbose: bool = False, debug: bool = False, log_dir: str | None = None) -> None:
        """Configure logging based on verbosity flags.

        Args:
            verbose: Enable INFO level logs.
            debug: Enable DEBUG logs and the debug log file (overrides verbose).
            log_dir: Directory for the debug log file. Defaults to MESHCTL_LOG_DIR or .logs.
        """
        root = logging.getLogger()
        root.handlers.clear()

        for logger_name in cls.NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

        log_dir = log_dir or os.getenv("MESHCTL_LOG_DIR", ".logs")
        console_level = logging.INFO if (verbose or debug) else logging.WARNING
        root_level = logging.DEBUG if debug else console_level

        # stderr keeps log lines out of piped table/JSON output
        console = Console(stderr=True)
        handler = RichHandler(
            console=console,
            show_path=False,
            show_time=False,
            show_level=debug,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setLevel(logging.DEBUG if debug else console_level)
        root.addHandler(handler)
        root.setLevel(root_level)

        if debug:
            cls._add_debug_file_handler(root, log_dir)

    @classmethod
    def _add_debug_file_handler(cls, root: logging.Logger, log_dir: str) -> None:
        log_path = os.path.join(log_dir, cls.LOG_FILE_NAME)
        try:
            os.makedirs(log_dir, exist_ok=True)
            with open(log_path, "a", encoding="utf-8"):
                pass
        except OSError as exc:
            print(f"[meshctl] Failed to open debug log file: {log_path} ({exc})", file=sys.stderr)
            return

        handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        root.addHandler(handler)
