import re

from .errors import ConflictError, ValidationError
from .repository import AccountStore, PHONE_EXISTS_MESSAGE

PHONE_PREFIX = "+62"
PHONE_DIGITS = re.compile(r"[0-9]{10,13}")
PHONE_FORMAT_MESSAGE = 'Phone numbers must start with "+62" and have 10 to 13 digits.'
FULL_NAME_MESSAGE = "Full name must be at minimum 3 characters and maximum 60 characters."
PASSWORD_MESSAGE = (
    "Passwords must have at least 6 characters, including 1 capital letter, "
    "1 number, and 1 special character."
)

PASSWORD_RULES = (
    re.compile(r".{6,}"),
    re.compile(r"[A-Z]"),
    re.compile(r"\d"),
    re.compile(r"[^A-Za-z0-9]"),
)


class Validator:
    """
    Field rules for registration and profile updates.

    Each check returns None when the value is acceptable and raises otherwise.
    The phone number check consults the account store for uniqueness.
    """

    def __init__(self, store: AccountStore):
        self.store = store

    def validate_phone_number(self, phone_number: str) -> None:
        is_valid = True

        digits = phone_number[len(PHONE_PREFIX):]
        if not PHONE_DIGITS.fullmatch(digits):
            is_valid = False
        if not phone_number.startswith(PHONE_PREFIX):
            is_valid = False

        # An existing number wins over any format problem
        if self.store.phone_number_exists(phone_number):
            raise ConflictError(PHONE_EXISTS_MESSAGE)

        if not is_valid:
            raise ValidationError(PHONE_FORMAT_MESSAGE)

    def validate_full_name(self, full_name: str) -> None:
        if len(full_name) < 3 or len(full_name) > 60:
            raise ValidationError(FULL_NAME_MESSAGE)

    def validate_password(self, password: str) -> None:
        # one generic message whichever rule fails
        if not all(rule.search(password) for rule in PASSWORD_RULES):
            raise ValidationError(PASSWORD_MESSAGE)
