"""Firestore-backed document store."""

from typing import Any

from google.cloud import firestore
from loguru import logger

from src.core.config import settings


def create_firestore_client() -> firestore.AsyncClient:
    """Create an async Firestore client from settings.

    Credentials come from the standard Google environment
    (GOOGLE_APPLICATION_CREDENTIALS or the metadata server).
    """
    logger.info(
        f"Creating Firestore client: project={settings.FIRESTORE_PROJECT_ID}, "
        f"database={settings.FIRESTORE_DATABASE}"
    )
    return firestore.AsyncClient(
        project=settings.FIRESTORE_PROJECT_ID,
        database=settings.FIRESTORE_DATABASE,
    )


class FirestoreDocumentStore:
    """DocumentStore implementation over firestore.AsyncClient."""

    def __init__(self, client: firestore.AsyncClient):
        self.client = client

    def _document(self, collection: str, doc_id: str) -> firestore.AsyncDocumentReference:
        return self.client.collection(collection).document(doc_id)

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        snapshot = await self._document(collection, doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        await self._document(collection, doc_id).set(data)

    async def update(
        self, collection: str, doc_id: str, fields: dict[str, Any]
    ) -> None:
        await self._document(collection, doc_id).update(fields)
