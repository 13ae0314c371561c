# ramblings/schemas/auth.py
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminUser(BaseModel):
    username: str
    is_authenticated: bool = True


class LoginResponse(BaseModel):
    success: bool = True
    user: AdminUser
