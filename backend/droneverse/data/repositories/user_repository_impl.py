import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from droneverse.data.db.database import Database, as_utc
from droneverse.data.db.models import UserRecord
from droneverse.domain.entities.user_entity import User
from droneverse.domain.exceptions import PersistenceError, UserAlreadyExistsError
from droneverse.domain.repositories.user_repository import UserRepository


def _user_entity(record: UserRecord) -> User:
    return User(
        id=record.id,
        name=record.name,
        email=record.email,
        password_hash=record.password_hash,
        created_at=as_utc(record.created_at),
    )


class UserRepositoryImpl(UserRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, user: User) -> User:
        record = UserRecord(
            id=str(uuid.uuid4()),
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            created_at=as_utc(user.created_at),
        )
        with self._db.session() as db:
            try:
                db.add(record)
                db.commit()
                db.refresh(record)
                return _user_entity(record)
            except IntegrityError as e:
                db.rollback()
                raise UserAlreadyExistsError("User already exists") from e
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError(f"Failed to create user: {e}") from e

    def get_by_email(self, email: str) -> Optional[User]:
        with self._db.session() as db:
            try:
                record = db.query(UserRecord).filter(UserRecord.email == email).first()
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to read user: {e}") from e
            return _user_entity(record) if record else None

    def get(self, user_id: str) -> Optional[User]:
        with self._db.session() as db:
            try:
                record = db.get(UserRecord, user_id)
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to read user {user_id}: {e}") from e
            return _user_entity(record) if record else None
