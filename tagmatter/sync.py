"""
Tag synchronization: reconcile inline hashtags with the front matter list.

    sync(document, lowercase) -> new document | NO_CHANGE

The recorded list is rewritten only when it differs from the sorted set of
inline tags. Other front matter lines and the body are never touched.
"""

import logging

from .extract import extract_tags
from .frontmatter import (
    parse_document,
    read_tags,
    rebuild_tags,
    remove_tags,
    render_document,
)
from .types import NO_CHANGE, ParsedDocument, SyncResult, TagState

logger = logging.getLogger(__name__)


def _sorted_unique(tags: list[str]) -> list[str]:
    return sorted(set(tags))


def _tag_text(document: str, parsed: ParsedDocument) -> str:
    """Text scanned for inline tags: the document minus its tag section.

    Hashtags inside the tag section (``tags: #todo``, ``- a #b``) are not
    inline tags: the section is replaced on every rewrite.
    """
    if not parsed.had_block:
        return document
    metadata = remove_tags(parsed.metadata, parsed.newline)
    return render_document(metadata, parsed.body, parsed.newline)


def _tag_state(document: str, parsed: ParsedDocument, lowercase: bool) -> TagState:
    # Recorded tags are compared as stored, without case normalization
    return TagState(
        inline=_sorted_unique(extract_tags(_tag_text(document, parsed), lowercase)),
        recorded=_sorted_unique(read_tags(parsed.metadata)),
    )


def tag_state(document: str, lowercase: bool = True) -> TagState:
    """Inline and recorded tags of ``document``, sorted and deduplicated."""
    return _tag_state(document, parse_document(document), lowercase)


def sync(document: str, lowercase: bool = True) -> SyncResult:
    """Bring the front matter tag list of ``document`` in line with its hashtags.

    Returns the rewritten document, or ``NO_CHANGE`` when the recorded
    tags already equal the inline tags (ignoring order).

    - No inline tags: the tag section is removed, and the whole block with
      it when nothing else remains. A document without a block is left
      alone.
    - Otherwise the section is replaced in place, or prepended to the
      block, or a new block is put in front of the original document.
    """
    parsed = parse_document(document)
    state = _tag_state(document, parsed, lowercase)

    if state.in_sync:
        logger.debug("Tags unchanged: %s", state.inline)
        return NO_CHANGE

    nl = parsed.newline
    if not state.inline:
        if not parsed.had_block:
            return NO_CHANGE
        metadata = remove_tags(parsed.metadata, nl)
        if not metadata.strip():
            logger.debug("Dropping front matter, removed tags: %s", state.removed)
            return parsed.body
        logger.debug("Removing tag section: %s", state.removed)
        return render_document(metadata, parsed.body, nl)

    metadata = rebuild_tags(parsed.metadata, state.inline, parsed.had_block, nl)
    logger.debug("Writing tags %s (added %s, removed %s)",
                 state.inline, state.added, state.removed)
    if parsed.had_block:
        return render_document(metadata, parsed.body, nl)
    # No block: the whole original document becomes the body
    return render_document(metadata, document, nl)
