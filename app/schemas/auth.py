"""Authentication schemas"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Schema for POST /api/auth/login"""

    email: EmailStr = Field(..., description="Admin email (case-insensitive)")
    password: str = Field(..., min_length=1, description="Admin password")


class SessionUser(BaseModel):
    """Identity returned to the admin portal"""

    id: str
    email: str
    role: str
    name: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    user: SessionUser
