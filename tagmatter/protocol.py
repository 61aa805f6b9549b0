"""
Protocol definitions for document sources.

The sync engine works on strings. A document source is what the
integration layer reads documents from and writes results back to:

- FileDocumentSource (Markdown files on disk)
- anything else with the same two methods (tests use an in-memory dict)
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class DocumentSource(Protocol):
    """Read and write whole documents by id.

    Implementations perform no encoding or newline conversion beyond
    decoding the stored bytes; errors surface as ``OSError``.
    """

    def read(self, id: str) -> str: ...

    def write(self, id: str, text: str) -> None: ...
