"""Pydantic schemas for authentication"""
from pydantic import BaseModel, EmailStr
from typing import Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    name: str


class CurrentUserResponse(BaseModel):
    user: Optional[UserResponse] = None
