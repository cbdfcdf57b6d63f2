"""User repository implementations."""

from collections.abc import Callable

from loguru import logger

from src.core.config import settings
from src.core.domain.clock import now_millis
from src.core.domain.exceptions import ValidationError
from src.core.domain.result import Error, Result, Success
from src.core.infrastructure.logging import BusinessEvents
from src.modules.users.domain.entities import User
from src.modules.users.domain.ports import DocumentStore
from src.modules.users.domain.repository import UserRepository
from src.modules.users.infrastructure.mappers import UserDocumentMapper


class FirestoreUserRepository(UserRepository):
    """Firestore user repository implementation.

    Each method issues exactly one document store call. Any exception from
    the store or from parsing the document comes back as Error(cause).
    """

    def __init__(
        self,
        store: DocumentStore,
        mapper: UserDocumentMapper,
        collection: str | None = None,
        clock: Callable[[], int] = now_millis,
    ):
        self.store = store
        self.mapper = mapper
        self.collection = collection or settings.FIRESTORE_USERS_COLLECTION
        self.clock = clock
        self.logger = logger

    async def get_user_by_id(self, user_id: str) -> Result[User | None]:
        try:
            data = await self.store.get(self.collection, user_id)
            user = self.mapper.to_domain(data) if data is not None else None
        except Exception as e:
            return self._failure("get_user_by_id", user_id, e)

        BusinessEvents.user_fetched(user_id=user_id, found=user is not None)
        return Success(user)

    async def update_user(self, user: User) -> Result[None]:
        if not user.uid:
            return self._failure(
                "update_user", None, ValidationError("User document requires a uid")
            )

        try:
            await self.store.set(
                self.collection, user.uid, self.mapper.to_storage(user)
            )
        except Exception as e:
            return self._failure("update_user", user.uid, e)

        BusinessEvents.user_replaced(user_id=user.uid)
        return Success(None)

    async def update_online_status(self, user_id: str, is_online: bool) -> Result[None]:
        last_seen = self.clock()
        try:
            await self.store.update(
                self.collection,
                user_id,
                self.mapper.presence_fields(is_online, last_seen),
            )
        except Exception as e:
            return self._failure("update_online_status", user_id, e)

        BusinessEvents.presence_updated(
            user_id=user_id, is_online=is_online, last_seen=last_seen
        )
        return Success(None)

    async def update_fcm_token(self, user_id: str, token: str) -> Result[None]:
        try:
            await self.store.update(
                self.collection, user_id, self.mapper.fcm_token_fields(token)
            )
        except Exception as e:
            return self._failure("update_fcm_token", user_id, e)

        BusinessEvents.fcm_token_updated(user_id=user_id)
        return Success(None)

    def _failure(self, operation: str, user_id: str | None, error: Exception) -> Error:
        self.logger.warning(f"{operation} failed for user {user_id}: {error!r}")
        BusinessEvents.remote_call_failed(
            operation=operation, user_id=user_id, error=str(error)
        )
        return Error(error)
