"""
Inline tag extraction.

An inline tag is a ``#`` immediately followed by one or more letters,
digits, underscores or hyphens. Matching is greedy on that character
class, so trailing punctuation is never part of a tag::

    "#Luke, #together, and #galaxy."  ->  ["luke", "together", "galaxy"]
"""

import re

# Hashtag: '#' then word characters or hyphens
INLINE_TAG_PATTERN = re.compile(r"#([\w-]+)")


def extract_tags(text: str, lowercase: bool = True) -> list[str]:
    """Return the inline tags of ``text`` in first-seen order, deduplicated.

    When ``lowercase`` is set, tags are lowercased before deduplication,
    so ``#Tag`` and ``#tag`` collapse to one tag. Callers that compare
    tag sets sort the result themselves.
    """
    seen: set[str] = set()
    tags: list[str] = []
    for match in INLINE_TAG_PATTERN.finditer(text):
        tag = match.group(1)
        if not tag:
            continue
        if lowercase:
            tag = tag.lower()
        if tag not in seen:
            seen.add(tag)
            tags.append(tag)
    return tags
