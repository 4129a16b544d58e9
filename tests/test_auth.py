"""
Tests for user registration and login.

Tests cover:
- Password hashing
- UserRepositoryImpl against SQLite
- AuthUseCase register/authenticate rules
"""

import pytest

from droneverse.core.security.passwords import hash_password, verify_password
from droneverse.data.repositories.user_repository_impl import UserRepositoryImpl
from droneverse.domain.entities.user_entity import User
from droneverse.domain.exceptions import InvalidCredentialsError, UserAlreadyExistsError
from droneverse.domain.usecases.auth_usecase import AuthUseCase


@pytest.fixture
def users(database):
    return UserRepositoryImpl(database=database)


@pytest.fixture
def auth(users):
    return AuthUseCase(users=users)


class TestPasswords:
    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("blade-runner-42")
        assert hashed != "blade-runner-42"
        assert verify_password("blade-runner-42", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_same_password_hashes_differently(self):
        assert hash_password("secret") != hash_password("secret")

    def test_empty_hash_never_verifies(self):
        assert verify_password("anything", "") is False


class TestUserRepository:
    """Tests for SQLAlchemy-backed users."""

    def test_create_and_lookup(self, users):
        saved = users.create(User(name="Ana", email="ana@droneverse.io", password_hash="h"))
        assert saved.id
        assert users.get(saved.id).email == "ana@droneverse.io"
        assert users.get_by_email("ana@droneverse.io").password_hash == "h"
        assert users.get_by_email("nobody@droneverse.io") is None
        assert users.get("missing") is None

    def test_duplicate_email_rejected(self, users):
        users.create(User(name="Ana", email="ana@droneverse.io", password_hash="h"))
        with pytest.raises(UserAlreadyExistsError):
            users.create(User(name="Other", email="ana@droneverse.io", password_hash="h2"))


class TestAuthUseCase:
    """Tests for register/authenticate."""

    def test_register_lowercases_email_and_hashes(self, auth, users):
        user = auth.register("Ana", "  Ana@DroneVerse.io ", "blade-runner-42")
        assert user.email == "ana@droneverse.io"
        stored = users.get_by_email("ana@droneverse.io")
        assert stored.password_hash != "blade-runner-42"
        assert verify_password("blade-runner-42", stored.password_hash)

    def test_register_twice_rejected(self, auth):
        auth.register("Ana", "ana@droneverse.io", "pw")
        with pytest.raises(UserAlreadyExistsError):
            auth.register("Ana again", "ANA@droneverse.io", "pw")

    @pytest.mark.parametrize("name,email,password", [
        ("", "ana@droneverse.io", "pw"),
        ("Ana", "", "pw"),
        ("Ana", "ana@droneverse.io", ""),
    ])
    def test_missing_fields(self, auth, name, email, password):
        with pytest.raises(ValueError):
            auth.register(name, email, password)

    def test_authenticate_case_insensitive_email(self, auth):
        registered = auth.register("Ana", "ana@droneverse.io", "pw")
        assert auth.authenticate("ANA@droneverse.io", "pw").id == registered.id

    def test_wrong_password_and_unknown_user_look_the_same(self, auth):
        auth.register("Ana", "ana@droneverse.io", "pw")
        with pytest.raises(InvalidCredentialsError) as wrong_pw:
            auth.authenticate("ana@droneverse.io", "nope")
        with pytest.raises(InvalidCredentialsError) as unknown:
            auth.authenticate("ghost@droneverse.io", "pw")
        assert str(wrong_pw.value) == str(unknown.value) == "Invalid credentials"
