from pydantic import BaseModel, ConfigDict

from typing import List, Optional


class RegistrationRequest(BaseModel):
    full_name: str
    phone_number: str
    password: str


class RegistrationResponse(BaseModel):
    user_id: str


class RegistrationErrResponse(BaseModel):
    message: List[str]


class LoginRequest(BaseModel):
    phone_number: str
    password: str


class LoginResponse(BaseModel):
    token: str
    expire_in: str = "24 hours"


class ErrorResponse(BaseModel):
    message: str


class UserProfile(BaseModel):
    full_name: str
    phone_number: str

    model_config = ConfigDict(from_attributes=True)


class UpdateUserProfileRequest(BaseModel):
    full_name: Optional[str] = None
    phone_number: Optional[str] = None

    def changed_fields(self) -> dict:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


# Token payload
class TokenClaims(BaseModel):
    user_id: str
    phone_number: str
    exp: int

    model_config = ConfigDict(strict=True, extra="ignore")


class Credential(BaseModel):
    user_id: str
    password: str
    salt: str
