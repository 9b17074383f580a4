"""AdminUser schemas"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class AdminUserCreate(BaseModel):
    email: EmailStr = Field(..., description="Login email; stored lowercased")
    password: str = Field(..., min_length=1, description="Initial password (strength-checked)")
    role: Literal["SUPER_ADMIN", "MANAGER", "VIEWER"] = Field(..., description="MANAGER | VIEWER (SUPER_ADMIN is reserved for seeding)")
    name: Optional[str] = Field(None, max_length=200, description="Display name")


class AdminUserUpdate(BaseModel):
    role: Optional[Literal["SUPER_ADMIN", "MANAGER", "VIEWER"]] = None
    password: Optional[str] = Field(None, description="New password; empty keeps the current one")
    name: Optional[str] = Field(None, max_length=200)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class AdminUserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str]
    role: str
    created_at: datetime

    class Config:
        from_attributes = True


class AdminUserResult(BaseModel):
    success: bool = True
    user: AdminUserResponse


class AdminUserList(BaseModel):
    users: List[AdminUserResponse]
