"""
Markdown files on disk as a document source.

Files are read and written as UTF-8 with newline translation disabled, so
a document round-trips byte-for-byte apart from the rewritten tag list.
"""

import logging
import os
from pathlib import Path
from typing import Iterable

from .protocol import DocumentSource
from .sync import sync, tag_state
from .types import FAILED, NO_CHANGE, UNCHANGED, UPDATED, SyncOutcome

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"

# Refuse to load anything larger than this into memory
DEFAULT_MAX_SIZE = 10_000_000


class FileDocumentSource:
    """Documents identified by filesystem path."""

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE):
        self.max_size = max_size

    def read(self, id: str) -> str:
        path = Path(id)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if not path.is_file():
            raise IsADirectoryError(f"Not a file: {path}")

        file_size = path.stat().st_size
        if file_size > self.max_size:
            raise OSError(
                f"File too large: {file_size:,} bytes "
                f"(limit: {self.max_size:,} bytes)"
            )
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()

    def write(self, id: str, text: str) -> None:
        with open(Path(id), "w", encoding="utf-8", newline="") as f:
            f.write(text)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def iter_markdown_files(paths: Iterable[Path]) -> list[Path]:
    """Expand files and directories into a sorted list of Markdown files.

    Explicit file arguments are kept whatever their suffix. Directories are
    walked recursively for ``*.md``, skipping hidden entries (``.obsidian``,
    ``.git``) and symlinks.

    Raises:
        FileNotFoundError: If a path does not exist
    """
    found: set[Path] = set()
    for path in paths:
        path = Path(path).expanduser()
        if path.is_file():
            found.add(path)
            continue
        if not path.is_dir():
            raise FileNotFoundError(f"No such file or directory: {path}")
        for dirpath, dirnames, filenames in os.walk(path):
            dirnames[:] = [
                d for d in dirnames
                if not _is_hidden(d) and not os.path.islink(os.path.join(dirpath, d))
            ]
            for name in filenames:
                if _is_hidden(name) or not name.endswith(MARKDOWN_SUFFIX):
                    continue
                file_path = Path(dirpath) / name
                if file_path.is_symlink():
                    continue
                found.add(file_path)
    return sorted(found)


def sync_file(
    source: DocumentSource,
    doc_id: str,
    lowercase: bool = True,
    dry_run: bool = False,
) -> SyncOutcome:
    """Sync one document held by ``source``.

    Writes only when the tag list changes, and never with ``dry_run``.
    Read and write errors are reported as a failed outcome.
    """
    try:
        document = source.read(doc_id)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read %s: %s", doc_id, e)
        return SyncOutcome(id=doc_id, status=FAILED, error=str(e))

    result = sync(document, lowercase)
    if result is NO_CHANGE:
        return SyncOutcome(id=doc_id, status=UNCHANGED)

    state = tag_state(document, lowercase)
    if not dry_run:
        try:
            source.write(doc_id, result)
        except OSError as e:
            logger.warning("Failed to write %s: %s", doc_id, e)
            return SyncOutcome(
                id=doc_id, status=FAILED,
                added=state.added, removed=state.removed, error=str(e),
            )
        logger.info("Synced tags in %s: +%s -%s", doc_id, state.added, state.removed)
    return SyncOutcome(
        id=doc_id, status=UPDATED, added=state.added, removed=state.removed,
    )
