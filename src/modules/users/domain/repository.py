"""User repository interface."""

from abc import ABC, abstractmethod

from src.core.domain.result import Result
from src.modules.users.domain.entities import User


class UserRepository(ABC):
    """User profile repository.

    Every method performs a single remote call and returns a Result; remote
    faults are never raised to the caller.
    """

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> Result[User | None]:
        """Fetch a user. Success(None) when no document exists."""
        pass

    @abstractmethod
    async def update_user(self, user: User) -> Result[None]:
        """Replace the whole user document."""
        pass

    @abstractmethod
    async def update_online_status(self, user_id: str, is_online: bool) -> Result[None]:
        """Set the online flag and stamp last-seen with the current time."""
        pass

    @abstractmethod
    async def update_fcm_token(self, user_id: str, token: str) -> Result[None]:
        """Set the notification delivery token."""
        pass
