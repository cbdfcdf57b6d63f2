"""User module dependencies."""

from functools import lru_cache

from src.modules.users.domain.ports import DocumentStore
from src.modules.users.domain.repository import UserRepository
from src.modules.users.infrastructure.firestore_store import (
    FirestoreDocumentStore,
    create_firestore_client,
)
from src.modules.users.infrastructure.mappers import UserDocumentMapper
from src.modules.users.infrastructure.repositories import FirestoreUserRepository


def get_user_document_mapper() -> UserDocumentMapper:
    return UserDocumentMapper()


@lru_cache
def get_document_store() -> DocumentStore:
    return FirestoreDocumentStore(create_firestore_client())


def get_user_repository(store: DocumentStore | None = None) -> UserRepository:
    return FirestoreUserRepository(
        store or get_document_store(), get_user_document_mapper()
    )
