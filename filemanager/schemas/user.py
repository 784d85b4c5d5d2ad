import re
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

_LOWERCASE = re.compile(r"[a-z]")
_UPPERCASE = re.compile(r"[A-Z]")


def _trimmed(value, label: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string")
    value = value.strip()
    if len(value) < 2:
        raise ValueError(f"{label} is required")
    if len(value) > 100:
        raise ValueError(f"{label} is too long")
    return value


# Schema for the register request
class UserRegister(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    username: str
    password: str

    @field_validator("first_name", mode="before")
    @classmethod
    def check_first_name(cls, value):
        if value is None:
            return value
        return _trimmed(value, "First name")

    @field_validator("last_name", mode="before")
    @classmethod
    def check_last_name(cls, value):
        if value is None:
            return value
        return _trimmed(value, "Last name")

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, value):
        if value is None:
            return value
        if not isinstance(value, str):
            raise ValueError("Email is not valid")
        try:
            value = validate_email(value.strip(), check_deliverability=False).normalized
        except EmailNotValidError:
            raise ValueError("Email is not valid")
        return _trimmed(value, "Email")

    @field_validator("username", mode="before")
    @classmethod
    def check_username(cls, value):
        if value is None:
            return value
        return _trimmed(value, "Username")

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, value):
        if value is None:
            return value
        if not isinstance(value, str):
            raise ValueError("Password must be a string")
        if len(value) < 8:
            raise ValueError("Password must be at least 8 characters long")
        if not _LOWERCASE.search(value):
            raise ValueError("Password must contain at least one lowercase letter")
        if not _UPPERCASE.search(value):
            raise ValueError("Password must contain at least one uppercase letter")
        return value


# Partial variant for login: only supplied fields are checked
class UserLogin(UserRegister):
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


# Schema for responses (never carries the password)
class UserOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    username: str

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    message: str
    token: str


# Claims carried by the bearer token
class TokenClaims(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
