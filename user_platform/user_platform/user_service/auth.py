from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional
import random
import string

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import ValidationError as ClaimsValidationError

from .errors import InvalidTokenError, KeyLoadError, SigningError
from .schemas import TokenClaims

SALT_LENGTH = 16
SALT_ALPHABET = string.ascii_letters + string.digits
RSA_ALGORITHMS = ("RS256", "RS384", "RS512")

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=29000,
)


class PasswordHasher:
    """Salts and hashes passwords, and checks candidates against stored hashes."""

    def __init__(self, context: CryptContext = pwd_context, rng: Optional[random.Random] = None):
        self.context = context
        self._rng = rng or random.SystemRandom()

    def hash(self, password: str, salt: str) -> str:
        return self.context.hash(password + salt)

    def verify(self, password: str, salt: str, hashed_password: str) -> bool:
        try:
            return self.context.verify(password + salt, hashed_password)
        except (ValueError, TypeError):
            # unparseable stored hash
            return False

    def generate_salt(self) -> str:
        return "".join(self._rng.choice(SALT_ALPHABET) for _ in range(SALT_LENGTH))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issues and verifies RSA signed JWTs carrying user_id and phone_number.

    Key files are read on every call so rotated keys are picked up without a
    restart. Nothing about issued tokens is stored server side.
    """

    def __init__(
        self,
        private_key_path: str,
        public_key_path: str,
        algorithm: str = "RS256",
        expire_hours: int = 24,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if algorithm not in RSA_ALGORITHMS:
            raise ValueError(f"Unsupported signing algorithm '{algorithm}'. Must be one of: {', '.join(RSA_ALGORITHMS)}")
        self.private_key_path = private_key_path
        self.public_key_path = public_key_path
        self.algorithm = algorithm
        self.expire_hours = expire_hours
        self._clock = clock

    @staticmethod
    def _read_key_file(path: str, kind: str) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise KeyLoadError(f"failed to read {kind} key file: {e}") from e

    def _load_private_key(self) -> rsa.RSAPrivateKey:
        data = self._read_key_file(self.private_key_path, "private")
        try:
            key = serialization.load_pem_private_key(data, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyLoadError(f"failed to parse private key: {e}") from e
        if not isinstance(key, rsa.RSAPrivateKey):
            raise KeyLoadError("private key is not an RSA key")
        return key

    def _load_public_key(self) -> rsa.RSAPublicKey:
        data = self._read_key_file(self.public_key_path, "public")
        try:
            key = serialization.load_pem_public_key(data)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyLoadError(f"failed to parse public key: {e}") from e
        if not isinstance(key, rsa.RSAPublicKey):
            raise KeyLoadError("public key is not an RSA key")
        return key

    def issue(self, user_id: str, phone_number: str) -> str:
        private_key = self._load_private_key()
        expire = self._clock() + timedelta(hours=self.expire_hours)
        payload = {"user_id": user_id, "phone_number": phone_number, "exp": expire}
        try:
            return jwt.encode(payload, private_key, algorithm=self.algorithm)
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise SigningError(f"failed to sign token: {e}") from e

    def verify(self, token: str) -> TokenClaims:
        public_key = self._load_public_key()

        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as e:
            raise InvalidTokenError("Invalid token", InvalidTokenError.MALFORMED) from e

        alg = header.get("alg")
        if alg not in RSA_ALGORITHMS:
            raise InvalidTokenError(f"unexpected signing method: {alg}", InvalidTokenError.BAD_ALGORITHM)

        try:
            payload = jwt.decode(
                token,
                public_key,
                algorithms=list(RSA_ALGORITHMS),
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired", InvalidTokenError.EXPIRED) from e
        except jwt.InvalidSignatureError as e:
            raise InvalidTokenError("Invalid token signature", InvalidTokenError.BAD_SIGNATURE) from e
        except jwt.InvalidAlgorithmError as e:
            raise InvalidTokenError("Invalid token algorithm", InvalidTokenError.BAD_ALGORITHM) from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError("Invalid token", InvalidTokenError.MALFORMED) from e

        try:
            return TokenClaims.model_validate(payload)
        except ClaimsValidationError as e:
            raise InvalidTokenError("Invalid token claims", InvalidTokenError.MALFORMED) from e
