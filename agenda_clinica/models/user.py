from typing import Optional
from sqlmodel import SQLModel, Field


class UserBase(SQLModel):
    full_name: str
    email: str = Field(index=True, unique=True)
    phone: Optional[str] = None
    role: str = "user"  # "admin", "user" ou "partner"


class User(UserBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)


class ProfileUpdate(SQLModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
