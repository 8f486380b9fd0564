from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .users import UserResponse


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class AuthResponse(BaseModel):
    """Body of /register and /login; the refresh token travels as a cookie."""
    model_config = ConfigDict(populate_by_name=True)

    message: str
    user: UserResponse
    access_token: str = Field(..., alias="accessToken")


class AccessTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")


class Token(BaseModel):
    token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str
