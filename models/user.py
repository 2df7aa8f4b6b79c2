from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    name: Optional[str] = None


class UserCreate(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    password_hash: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
