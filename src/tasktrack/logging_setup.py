"""Logging configuration for the CLI and the service."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

# Marks handlers installed here so a second call replaces them.
_HANDLER_FLAG = "_tasktrack_handler"


def setup_logging(level: str | int = logging.WARNING, log_file: str | Path | None = None) -> None:
    """
    Configure logging with:
    - Console handler: rich-formatted, on stderr
    - File handler (optional): full logs at DEBUG for later inspection

    Call this once, early, from the entry point.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        if getattr(h, _HANDLER_FLAG, False):
            root.removeHandler(h)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    setattr(console_handler, _HANDLER_FLAG, True)
    root.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_path), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        setattr(file_handler, _HANDLER_FLAG, True)
        root.addHandler(file_handler)

    # Werkzeug's per-request lines duplicate the service's own request log.
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.captureWarnings(True)
