"""
Account endpoints: registration, login and profile management.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..auth import PasswordHasher, TokenService
from ..config import settings
from ..db import get_db
from ..errors import AuthError, NotFoundError
from ..repository import AccountStore
from ..schemas import (
    RegistrationRequest,
    RegistrationResponse,
    RegistrationErrResponse,
    LoginRequest,
    LoginResponse,
    ErrorResponse,
    UserProfile,
    UpdateUserProfileRequest,
)
from ..service import IdentityService
from ..validator import Validator

router = APIRouter(tags=["users"])
logger = logging.getLogger(__name__)

password_hasher = PasswordHasher()


def get_token_service() -> TokenService:
    return TokenService(
        private_key_path=settings.PRIVATE_KEY,
        public_key_path=settings.PUBLIC_KEY,
        algorithm=settings.JWT_ALGORITHM,
        expire_hours=settings.TOKEN_EXPIRE_HOURS,
    )


def get_identity_service(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> IdentityService:
    store = AccountStore(db)
    return IdentityService(store, Validator(store), password_hasher, tokens)


def get_bearer_token(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> str:
    if not authorization:
        raise AuthError("Authorization header is missing")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthError("JWT token is missing")
    return token


def expire_in_text(hours: int) -> str:
    return f"{hours} hour" if hours == 1 else f"{hours} hours"


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegistrationResponse,
    responses={400: {"model": RegistrationErrResponse}},
)
def register(payload: RegistrationRequest, service: IdentityService = Depends(get_identity_service)):
    user_id, errors = service.register(payload)
    if errors:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=RegistrationErrResponse(message=errors).model_dump(),
        )
    return RegistrationResponse(user_id=user_id)


@router.post("/login", response_model=LoginResponse, responses={400: {"model": ErrorResponse}})
def login(payload: LoginRequest, service: IdentityService = Depends(get_identity_service)):
    try:
        token = service.login(payload)
    except (AuthError, NotFoundError) as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(message=e.message).model_dump(),
        )
    return LoginResponse(token=token, expire_in=expire_in_text(service.tokens.expire_hours))


@router.get("/profile", response_model=UserProfile, responses={403: {"model": ErrorResponse}})
def get_profile(
    token: str = Depends(get_bearer_token),
    service: IdentityService = Depends(get_identity_service),
):
    return service.get_profile(token)


@router.patch(
    "/profile",
    response_model=UserProfile,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_profile(
    payload: UpdateUserProfileRequest,
    token: str = Depends(get_bearer_token),
    service: IdentityService = Depends(get_identity_service),
):
    return service.update_profile(token, payload)
