"""User entity-document mappers."""

from typing import Any

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.users.domain.entities import User

# Document field names used by partial updates
FIELD_IS_ONLINE = "isOnline"
FIELD_LAST_SEEN = "lastSeen"
FIELD_FCM_TOKEN = "fcmToken"


class UserDocumentMapper(BaseMapper[User, dict[str, Any]]):
    """User entity-document mapper."""

    def to_domain(self, data: dict[str, Any]) -> User:
        return User.model_validate(data)

    def to_storage(self, entity: User) -> dict[str, Any]:
        return entity.model_dump(mode="json", by_alias=True)

    def presence_fields(self, is_online: bool, last_seen: int) -> dict[str, Any]:
        return {FIELD_IS_ONLINE: is_online, FIELD_LAST_SEEN: last_seen}

    def fcm_token_fields(self, token: str) -> dict[str, Any]:
        return {FIELD_FCM_TOKEN: token}
