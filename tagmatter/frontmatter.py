"""
Front matter parsing and tag-section rewriting.

Only one shape of front matter is understood: a block opened and closed
by ``---`` lines at the very start of the document, holding a flat list
of scalars under ``tags:``. Everything else in the block is opaque text
and is carried through verbatim.

The tag section is located with a line-scanning automaton rather than a
YAML parser, so unrelated lines round-trip byte-for-byte::

    before-section --("tags:" line)--> in-section
    in-section --(non-empty, unindented, non-item line)--> after-section

Both forms of the list are read::

    tags:                tags: [a, "b", 'c']
      - a
      - b

and the block-list form is always written.
"""

import re
from typing import Sequence

from .types import DELIMITER, TAG_ITEM_INDENT, TAGS_KEY, ParsedDocument

# Inline array on the key line: tags: [a, b, c]
_INLINE_LIST_PATTERN = re.compile(r"tags:\s*\[(.*)\]")

_QUOTES = "'\""

# Automaton states (reader) and line labels (writers)
_BEFORE = "before-section"
_IN = "in-section"
_AFTER = "after-section"
_KEY = "key"


# -----------------------------------------------------------------------------
# Block parsing
# -----------------------------------------------------------------------------

def _detect_newline(text: str) -> str:
    """Terminator of the first line of ``text`` (``\\n`` when there is none)."""
    end = text.find("\n")
    return "\r\n" if end > 0 and text[end - 1] == "\r" else "\n"


def parse_document(document: str) -> ParsedDocument:
    """Split ``document`` into front matter and body.

    A block is present only when the document starts with a ``---`` line
    and a second ``---`` line follows (with zero or more lines between).
    The closing delimiter may end the document, leaving an empty body.
    The terminator of the first line (``\\n`` or ``\\r\\n``) is used as
    the document's newline.
    """
    newline = _detect_newline(document)
    no_block = ParsedDocument(
        metadata="", body=document, had_block=False, newline=newline,
    )
    if not document.startswith(DELIMITER + newline):
        return no_block

    rest = document[len(DELIMITER) + len(newline):]
    pos = 0
    while True:
        end = rest.find(newline, pos)
        line = rest[pos:] if end == -1 else rest[pos:end]
        if line == DELIMITER:
            # Drop the terminator of the last metadata line
            metadata = rest[:max(pos - len(newline), 0)]
            body = "" if end == -1 else rest[end + len(newline):]
            return ParsedDocument(
                metadata=metadata, body=body, had_block=True, newline=newline,
            )
        if end == -1:
            return no_block
        pos = end + len(newline)


def render_document(metadata: str, body: str, newline: str = "\n") -> str:
    """Join front matter text and body back into a document."""
    return f"{DELIMITER}{newline}{metadata}{newline}{DELIMITER}{newline}{body}"


# -----------------------------------------------------------------------------
# Tag section reading
# -----------------------------------------------------------------------------

def _is_item(stripped: str) -> bool:
    return stripped.startswith("-")


def _is_indented(line: str) -> bool:
    return line[:1] in (" ", "\t")


def _ends_section(line: str, stripped: str) -> bool:
    """A non-empty line back at the left margin that is not a list item."""
    return bool(stripped) and not _is_indented(line) and not _is_item(stripped)


def _split_inline(items: str) -> list[str]:
    tags = []
    for item in items.split(","):
        tag = item.strip().strip(_QUOTES).strip()
        if tag:
            tags.append(tag)
    return tags


def read_tags(metadata: str) -> list[str]:
    """Return the raw tags recorded under ``tags:`` in ``metadata``.

    Only the first tag section is read. An inline array on the key line
    is returned as soon as it is seen. Items with nothing after the dash
    are skipped. The result may hold duplicates; callers normalize.
    """
    tags: list[str] = []
    state = _BEFORE
    for line in metadata.split("\n"):
        stripped = line.strip()
        if state == _BEFORE:
            if stripped.startswith(TAGS_KEY):
                inline = _INLINE_LIST_PATTERN.match(stripped)
                if inline:
                    return _split_inline(inline.group(1))
                state = _IN
            continue
        if _is_item(stripped):
            tag = stripped[1:].strip()
            if tag:
                tags.append(tag)
        elif _ends_section(line, stripped):
            break
    return tags


# -----------------------------------------------------------------------------
# Tag section rewriting
# -----------------------------------------------------------------------------

def _label_lines(lines: Sequence[str]) -> list[str]:
    """Label each line as the key line, part of a tag section, or other.

    Every ``tags:`` line opens a section; the section swallows items,
    indented lines and blank lines until a line ends it.
    """
    labels = []
    state = _BEFORE
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(TAGS_KEY):
            state = _IN
            labels.append(_KEY)
            continue
        if state == _IN and _ends_section(line, stripped):
            state = _AFTER
        labels.append(_IN if state == _IN else _AFTER)
    return labels


def _section_lines(tags: Sequence[str]) -> list[str]:
    return [TAGS_KEY] + [f"{TAG_ITEM_INDENT}- {tag}" for tag in tags]


def remove_tags(metadata: str, newline: str = "\n") -> str:
    """Drop every tag section from ``metadata``, keeping all other lines."""
    lines = metadata.split(newline)
    kept = [
        line for line, label in zip(lines, _label_lines(lines))
        if label not in (_KEY, _IN)
    ]
    return newline.join(kept)


def rebuild_tags(
    metadata: str,
    tags: Sequence[str],
    had_block: bool = True,
    newline: str = "\n",
) -> str:
    """Return ``metadata`` with its tag section replaced by ``tags``.

    An existing section is replaced where it stands; otherwise a new
    section is put first. ``tags`` is written in the given order, one
    item per line. Later duplicate sections are dropped.
    """
    section = _section_lines(tags)
    if not had_block or not metadata:
        return newline.join(section)

    lines = metadata.split(newline)
    out: list[str] = []
    inserted = False
    for line, label in zip(lines, _label_lines(lines)):
        if label == _KEY:
            if not inserted:
                out.extend(section)
                inserted = True
            continue
        if label == _IN:
            continue
        out.append(line)

    if not inserted:
        out = section + out
    return newline.join(out)
