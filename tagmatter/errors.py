"""
Error log for the tagmatter CLI.

Unexpected failures are appended to ``tagmatter-errors.log`` in the config
directory together with the command line that caused them. The terminal
only gets a one-line message.
"""

import logging
import os
import shlex
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from .config import get_config_dir

logger = logging.getLogger(__name__)

ERROR_LOG_FILENAME = "tagmatter-errors.log"


def format_entry(exc: BaseException, argv: Sequence[str] = ()) -> str:
    """Render one log entry: separator, timestamp and command, traceback."""
    timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
    header = f"[{timestamp}]"
    if argv:
        header += " tagmatter " + shlex.join(argv)
    return "\n".join(["", "=" * 60, header, ""]) + "".join(traceback.format_exception(exc))


def log_exception(exc: BaseException, argv: Sequence[str] = ()) -> Path:
    """
    Append ``exc`` with its traceback to the error log.

    Args:
        exc: The exception that ended the command
        argv: Command-line arguments after the program name

    Returns:
        Path to the error log file (owner read/write only)
    """
    log_path = get_config_dir() / ERROR_LOG_FILENAME
    entry = format_entry(exc, argv)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a", encoding="utf-8") as f:
            f.write(entry)
    except OSError as e:
        logger.warning("Could not write error log %s: %s", log_path, e)
    return log_path
