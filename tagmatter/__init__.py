"""
tagmatter

Keeps the ``tags:`` list in a Markdown file's front matter in step with the
inline ``#hashtags`` in its text.

Quick Start:
    from tagmatter import sync, NO_CHANGE

    result = sync(text)
    if result is not NO_CHANGE:
        path.write_text(result)

CLI Usage:
    tagmatter sync notes/
    tagmatter watch notes/
    tagmatter config lowercase_tags false

Environment Variables:
    TAGMATTER_CONFIG_DIR  - Override the config directory (~/.tagmatter)
    TAGMATTER_VERBOSE     - Set to 1 for debug logging in the CLI
"""

from .extract import extract_tags
from .frontmatter import parse_document, read_tags, rebuild_tags, remove_tags
from .sync import sync, tag_state
from .types import NO_CHANGE, ParsedDocument, SyncOutcome, TagState

__all__ = [
    "NO_CHANGE",
    "ParsedDocument",
    "SyncOutcome",
    "TagState",
    "extract_tags",
    "parse_document",
    "read_tags",
    "rebuild_tags",
    "remove_tags",
    "sync",
    "tag_state",
]
