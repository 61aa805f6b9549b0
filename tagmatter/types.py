"""
Data types for tag synchronization.
"""

import enum
from dataclasses import dataclass, field
from typing import Literal, Optional, Union


# Front matter delimiter line and the key of the managed tag list.
# Neither is configurable.
DELIMITER = "---"
TAGS_KEY = "tags:"

# Indentation used for synthesized list items
TAG_ITEM_INDENT = "  "


class _Sentinel(enum.Enum):
    NO_CHANGE = "no-change"

    def __repr__(self) -> str:
        return self.name


# Returned by sync() when the recorded tags already match the inline tags
NO_CHANGE = _Sentinel.NO_CHANGE

SyncResult = Union[str, Literal[_Sentinel.NO_CHANGE]]


@dataclass(frozen=True)
class ParsedDocument:
    """A document split at its front matter block.

    ``metadata`` is the raw text between the delimiter lines, without the
    terminator of its last line. ``body`` is everything after the closing
    delimiter line. Without a block, ``body`` is the whole document.
    """
    metadata: str
    body: str
    had_block: bool
    newline: str = "\n"


@dataclass(frozen=True)
class TagState:
    """Inline and recorded tags of one document, sorted and deduplicated."""
    inline: list[str]
    recorded: list[str]

    @property
    def added(self) -> list[str]:
        """Tags present inline but not yet recorded."""
        recorded = set(self.recorded)
        return [t for t in self.inline if t not in recorded]

    @property
    def removed(self) -> list[str]:
        """Recorded tags no longer present inline."""
        inline = set(self.inline)
        return [t for t in self.recorded if t not in inline]

    @property
    def in_sync(self) -> bool:
        return self.inline == self.recorded


# Outcome statuses for syncing a stored document
UPDATED = "updated"
UNCHANGED = "unchanged"
BUSY = "busy"
FAILED = "failed"


@dataclass
class SyncOutcome:
    """Result of syncing one document held by a document source."""
    id: str
    status: str
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.status == UPDATED

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "status": self.status,
            "added": list(self.added),
            "removed": list(self.removed),
        }
        if self.error:
            d["error"] = self.error
        return d
