from abc import ABC, abstractmethod
from typing import Optional

from droneverse.domain.entities.user_entity import User


class UserRepository(ABC):
    @abstractmethod
    def create(self, user: User) -> User:
        """Store a new user. Raises UserAlreadyExistsError when the email is taken."""
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        raise NotImplementedError
