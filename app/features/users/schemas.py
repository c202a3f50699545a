"""
Pydantic schemas for user-related requests and responses.
"""
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.features.permissions.roles import Role
from app.features.users.auth import BCRYPT_MAX_PASSWORD_BYTES, password_too_long


def check_password_bytes(value):
    if value is not None and password_too_long(value):
        raise ValueError(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
    return value


class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=50)
    department: str | None = Field(None, max_length=100)


class UserCreate(UserBase):
    """Schema for creating a user through the management interface."""
    password: str = Field(..., min_length=8, max_length=72, description="Plaintext, hashed before storage")
    role: Role

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return check_password_bytes(value)


class UserUpdate(BaseModel):
    """Partial update of another user's record (management interface)."""
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8, max_length=72)
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=50)
    department: str | None = Field(None, max_length=100)
    role: Role | None = None
    is_active: bool | None = None
    profile_completed: bool | None = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return check_password_bytes(value)


class ProfileFields(BaseModel):
    """Self-service profile fields; role and status are not editable here."""
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=50)
    gender: str | None = Field(None, max_length=20)
    marital_status: str | None = Field(None, max_length=30)
    address: str | None = Field(None, max_length=500)
    residence_place: str | None = Field(None, max_length=255)
    birth_date: date | None = None
    birth_place: str | None = Field(None, max_length=255)
    nationality: str | None = Field(None, max_length=100)
    id_document_type: str | None = Field(None, max_length=50)
    id_document_number: str | None = Field(None, max_length=100)
    profile_image_url: str | None = Field(None, max_length=500)


class ProfileComplete(ProfileFields):
    """Profile-completion form; the identity fields become mandatory."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=50)
    birth_date: date
    nationality: str = Field(..., min_length=1, max_length=100)


class UserResponse(UserBase):
    """User record as returned by the API (never includes the password hash)."""
    id: str
    role: str
    profile_completed: bool
    is_active: bool
    gender: str | None = None
    marital_status: str | None = None
    address: str | None = None
    residence_place: str | None = None
    birth_date: date | None = None
    birth_place: str | None = None
    nationality: str | None = None
    id_document_type: str | None = None
    id_document_number: str | None = None
    profile_image_url: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class TemporaryPasswordResponse(BaseModel):
    password: str
