"""
Account store: transactional persistence of users, credentials and login counters.
"""
from contextlib import contextmanager
from typing import Iterator, Optional
import logging
import uuid

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ConflictError, NotFoundError, StorageError
from .models import LoginCounter, Password, User
from .schemas import Credential, UserProfile

logger = logging.getLogger(__name__)

PHONE_EXISTS_MESSAGE = "Phone numbers already exists."
PROFILE_FIELDS = ("full_name", "phone_number")


class AccountStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit everything done inside the block, or roll all of it back.

        SQLAlchemy failures are re-raised as StorageError. Service errors raised
        by the caller inside the block also roll back and propagate unchanged.
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Transaction rolled back: %s", e)
            raise StorageError("Failed to complete database transaction") from e
        except Exception:
            self.db.rollback()
            raise

    def phone_number_exists(self, phone_number: str) -> bool:
        try:
            count = (
                self.db.query(func.count(User.phone_number))
                .filter(User.phone_number == phone_number)
                .scalar()
            )
        except SQLAlchemyError as e:
            raise StorageError("Failed to look up phone number") from e
        return bool(count)

    def create_account(self, full_name: str, phone_number: str, password_hash: str, salt: str) -> str:
        """
        Insert the user, its zeroed login counter and its credential atomically.

        Returns the generated user id. A unique violation on the phone number
        surfaces as ConflictError; any other failure as StorageError. Either
        way no row from this call stays visible.
        """
        user_id = str(uuid.uuid4())
        with self.transaction() as db:
            db.add(User(id=user_id, full_name=full_name, phone_number=phone_number))
            try:
                db.flush()
            except IntegrityError as e:
                raise ConflictError(PHONE_EXISTS_MESSAGE) from e

            db.add(LoginCounter(user_id=user_id, success_login=0))
            db.flush()

            db.add(Password(user_id=user_id, password=password_hash, salt=salt))
            db.flush()

        logger.info("Account created: user_id=%s", user_id)
        return user_id

    def find_credential_by_phone(self, phone_number: str) -> Optional[Credential]:
        row = (
            self.db.query(User.id, Password.password, Password.salt)
            .join(Password, Password.user_id == User.id)
            .filter(User.phone_number == phone_number)
            .first()
        )
        if row is None:
            return None
        return Credential(user_id=row.id, password=row.password, salt=row.salt)

    def increment_login_counter(self, user_id: str) -> None:
        updated = (
            self.db.query(LoginCounter)
            .filter(LoginCounter.user_id == user_id)
            .update(
                {LoginCounter.success_login: LoginCounter.success_login + 1},
                synchronize_session=False,
            )
        )
        if updated != 1:
            raise StorageError(f"Login counter missing for user {user_id}")

    def get_login_count(self, user_id: str) -> int:
        try:
            counter = self.db.get(LoginCounter, user_id)
        except SQLAlchemyError as e:
            raise StorageError("Failed to read login counter") from e
        if counter is None:
            raise NotFoundError("User not found.")
        return counter.success_login

    def get_profile(self, user_id: str) -> UserProfile:
        try:
            user = self.db.get(User, user_id)
        except SQLAlchemyError as e:
            raise StorageError("Failed to read user profile") from e
        if user is None:
            raise NotFoundError("User not found.")
        return UserProfile.model_validate(user)

    def update_profile(self, user_id: str, fields: dict) -> UserProfile:
        """
        Apply the recognised fields in `fields` and return the refreshed profile.

        Unknown keys are ignored; an empty mapping changes nothing.
        """
        changes = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
        if changes:
            with self.transaction() as db:
                user = db.get(User, user_id)
                if user is None:
                    raise NotFoundError("User not found.")
                for name, value in changes.items():
                    setattr(user, name, value)
                try:
                    db.flush()
                except IntegrityError as e:
                    raise ConflictError(PHONE_EXISTS_MESSAGE) from e
            logger.info("Profile updated: user_id=%s fields=%s", user_id, sorted(changes))
        return self.get_profile(user_id)
