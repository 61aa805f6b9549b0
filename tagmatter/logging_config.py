"""
Logging configuration for tagmatter.

All output goes through the ``tagmatter`` package logger. The CLI is quiet
by default; ``--verbose`` or TAGMATTER_VERBOSE=1 turns on debug output,
and ``watch`` keeps a rotating operations log in the config directory.
"""

import logging
import sys
import warnings
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "tagmatter"

OPS_LOG_FILENAME = "tagmatter-ops.log"
OPS_LOG_MAX_BYTES = 1_000_000
OPS_LOG_BACKUPS = 3

_debug_handler: Optional[logging.Handler] = None


def configure_quiet_mode(quiet: bool = True):
    """
    Show only warnings and errors from tagmatter.

    Args:
        quiet: If False, restore the default level and Python warnings.
    """
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if quiet:
        warnings.filterwarnings("ignore")
        pkg_logger.setLevel(logging.WARNING)
    else:
        warnings.filterwarnings("default")
        pkg_logger.setLevel(logging.NOTSET)


def enable_debug_mode() -> logging.Handler:
    """Send tagmatter debug output to stderr. Repeated calls add no handler."""
    global _debug_handler
    warnings.filterwarnings("default")
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(logging.DEBUG)

    if _debug_handler is None:
        _debug_handler = logging.StreamHandler(sys.stderr)
        _debug_handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        ))
    if _debug_handler not in pkg_logger.handlers:
        pkg_logger.addHandler(_debug_handler)
    return _debug_handler


def configure_ops_log(config_dir: Path, level: int = logging.INFO) -> RotatingFileHandler:
    """Record synced and failed files in ``{config_dir}/tagmatter-ops.log``.

    The package logger is lowered to ``level`` if quiet mode set it higher.
    Detach the returned handler with remove_handler().
    """
    log_path = Path(config_dir) / OPS_LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=OPS_LOG_MAX_BYTES,
        backupCount=OPS_LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.addHandler(handler)
    if pkg_logger.getEffectiveLevel() > level:
        pkg_logger.setLevel(level)
    return handler


def remove_handler(handler: logging.Handler) -> None:
    """Detach ``handler`` from the package logger and close it."""
    logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
    handler.close()
