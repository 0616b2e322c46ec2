"""
Identity workflow: registration, login and profile management.

The service composes the validator, password hasher, token service and
account store. It never touches HTTP; routes hand it parsed request models
and a bare bearer token string.
"""
from typing import List, Tuple
import logging

from .auth import PasswordHasher, TokenService
from .errors import AuthError, ConflictError, NotFoundError, StorageError, ValidationError
from .repository import AccountStore
from .schemas import LoginRequest, RegistrationRequest, UpdateUserProfileRequest, UserProfile
from .utils.event_logger import log_account_event
from .validator import Validator

logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found."
WRONG_PASSWORD_MESSAGE = "Wrong password"


class IdentityService:
    def __init__(
        self,
        store: AccountStore,
        validator: Validator,
        hasher: PasswordHasher,
        tokens: TokenService,
    ):
        self.store = store
        self.validator = validator
        self.hasher = hasher
        self.tokens = tokens

    def register(self, request: RegistrationRequest) -> Tuple[str, List[str]]:
        """
        Validate every field, then create the account.

        Returns (user_id, errors). All failing fields are reported together,
        each prefixed with its field name; nothing is persisted in that case.
        On success errors is empty.
        """
        checks = (
            ("phone_number", self.validator.validate_phone_number, request.phone_number),
            ("full_name", self.validator.validate_full_name, request.full_name),
            ("password", self.validator.validate_password, request.password),
        )
        errors = []
        for field, check, value in checks:
            try:
                check(value)
            except (ValidationError, ConflictError) as e:
                errors.append(f"{field}: {e.message}")

        if errors:
            log_account_event("register_failure", phone_number=request.phone_number, errors=len(errors))
            return "", errors

        salt = self.hasher.generate_salt()
        try:
            password_hash = self.hasher.hash(request.password, salt)
        except ValueError as e:
            # passlib refuses oversized secrets
            return "", [f"password: {e}"]

        try:
            user_id = self.store.create_account(request.full_name, request.phone_number, password_hash, salt)
        except ConflictError as e:
            log_account_event("register_failure", phone_number=request.phone_number, reason="conflict")
            return "", [f"phone_number: {e.message}"]
        except StorageError as e:
            logger.error("Account creation failed: %s", e.__cause__ or e)
            log_account_event("register_failure", phone_number=request.phone_number, reason="storage")
            return "", [e.message]

        log_account_event("register_success", user_id=user_id, phone_number=request.phone_number)
        return user_id, []

    def login(self, request: LoginRequest) -> str:
        """
        Check the phone number and password and return a signed token.

        The credential lookup and the login counter increment share one
        transaction; if the increment fails the login fails with it.
        """
        with self.store.transaction():
            credential = self.store.find_credential_by_phone(request.phone_number)
            if credential is None:
                log_account_event("login_failure", phone_number=request.phone_number, reason="not_found")
                raise NotFoundError(USER_NOT_FOUND_MESSAGE)

            if not self.hasher.verify(request.password, credential.salt, credential.password):
                log_account_event(
                    "login_failure", user_id=credential.user_id,
                    phone_number=request.phone_number, reason="wrong_password"
                )
                raise AuthError(WRONG_PASSWORD_MESSAGE)

            self.store.increment_login_counter(credential.user_id)

        token = self.tokens.issue(credential.user_id, request.phone_number)
        log_account_event("login_success", user_id=credential.user_id, phone_number=request.phone_number)
        return token

    def get_profile(self, token: str) -> UserProfile:
        claims = self.tokens.verify(token)
        return self.store.get_profile(claims.user_id)

    def update_profile(self, token: str, request: UpdateUserProfileRequest) -> UserProfile:
        """
        Validate and apply the fields present in the request.

        Unlike register, the first invalid field aborts the update. Phone
        numbers already in use raise ConflictError.
        """
        claims = self.tokens.verify(token)
        fields = request.changed_fields()

        validators = {
            "full_name": self.validator.validate_full_name,
            "phone_number": self.validator.validate_phone_number,
        }
        for field, value in fields.items():
            try:
                validators[field](value)
            except ValidationError as e:
                raise ValidationError([f"{field}: {m}" for m in e.messages]) from e

        profile = self.store.update_profile(claims.user_id, fields)
        if fields:
            log_account_event(
                "profile_update", user_id=claims.user_id,
                phone_number=profile.phone_number, fields=",".join(sorted(fields))
            )
        return profile
