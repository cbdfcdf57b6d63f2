"""User module ports."""

from typing import Any, Protocol


class DocumentStore(Protocol):
    """Port for a remote document database addressed by collection and key."""

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Read a document. Returns None when it does not exist."""
        ...

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or fully replace a document."""
        ...

    async def update(
        self, collection: str, doc_id: str, fields: dict[str, Any]
    ) -> None:
        """Update named fields of an existing document."""
        ...
