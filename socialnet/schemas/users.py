from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..models.user import RelationshipStatus


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    profile_picture: Optional[str] = None
    cover_picture: Optional[str] = ""
    followers: List[str] = []
    followings: List[str] = []
    is_admin: bool = False
    desc: Optional[str] = ""
    city: Optional[str] = None
    hometown: Optional[str] = None
    relationship_status: Optional[RelationshipStatus] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserUpdate(BaseModel):
    """Profile changes. Unknown fields are rejected rather than written through."""
    model_config = ConfigDict(extra="forbid")

    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    profile_picture: Optional[str] = Field(None, max_length=255)
    cover_picture: Optional[str] = Field(None, max_length=255)
    desc: Optional[str] = None
    city: Optional[str] = Field(None, max_length=50)
    hometown: Optional[str] = Field(None, max_length=50)
    relationship_status: Optional[RelationshipStatus] = None
    is_admin: Optional[bool] = None


class UserEnvelope(BaseModel):
    user: UserResponse
