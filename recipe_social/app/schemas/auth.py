# recipe_social/app/schemas/auth.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginUser(BaseModel):
    id: str
    email: str
    fullName: str


class LoginResponse(BaseModel):
    message: str
    user: LoginUser
    token: str


class MessageResponse(BaseModel):
    message: str
