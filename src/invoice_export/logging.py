import logging
import os
import sys
from typing import Optional, Union


ROOT_NAME = "invoice_export"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def _coerce_level(value: Union[str, int, None]) -> int:
    if isinstance(value, str):
        return _LEVELS.get(value.upper().strip(), logging.INFO)
    if isinstance(value, int):
        return value
    return logging.INFO


def _root() -> logging.Logger:
    """Configure the package logger once; module loggers hang below it.

    Output goes to stderr so stdout stays free for exported paths and
    dialect listings. LOG_FILE (optional) appends a copy of every record.
    """
    root = logging.getLogger(ROOT_NAME)
    if getattr(root, "_invoice_export_configured", False):
        return root

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(formatter)
    root.addHandler(sh)

    log_file = os.environ.get("LOG_FILE")
    if log_file:
        try:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError:
            root.warning("LOG_FILE could not be opened; continuing without file logging")

    root.setLevel(_coerce_level(os.environ.get("LOG_LEVEL", "INFO")))
    root.propagate = False
    setattr(root, "_invoice_export_configured", True)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return ``invoice_export.<name>``, sharing the package handlers."""
    _root()
    return logging.getLogger(f"{ROOT_NAME}.{name}")


def set_level(level: Optional[Union[str, int]]) -> None:
    """Override LOG_LEVEL for every package logger, e.g. from ``serve --log-level``."""
    if level is None:
        return
    _root().setLevel(_coerce_level(level))
