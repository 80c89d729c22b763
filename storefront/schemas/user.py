from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional


class UserBase(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255, description="User display name")


class UserCreate(UserBase):
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=32)


class UserResponse(UserBase):
    id: int
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}
