from typing import Optional

from droneverse.core.security.passwords import hash_password, verify_password
from droneverse.core.utils.logger import get_logger
from droneverse.domain.entities.user_entity import User
from droneverse.domain.exceptions import InvalidCredentialsError, UserAlreadyExistsError
from droneverse.domain.repositories.user_repository import UserRepository

_logger = get_logger("auth_usecase")


class AuthUseCase:
    """Registers users and checks their credentials. Emails are matched case-insensitively."""

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def register(self, name: str, email: str, password: str) -> User:
        name, email = (name or "").strip(), (email or "").strip().lower()
        if not name or not email or not password:
            raise ValueError("Missing fields")
        if self._users.get_by_email(email) is not None:
            raise UserAlreadyExistsError("User already exists")
        user = self._users.create(User(name=name, email=email, password_hash=hash_password(password)))
        _logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._users.get_by_email((email or "").strip().lower())
        if user is None or not verify_password(password or "", user.password_hash):
            _logger.info("Failed login attempt")
            raise InvalidCredentialsError("Invalid credentials")
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)
