from pydantic import BaseModel, EmailStr
from typing import Optional


class AdminLogin(BaseModel):
    email: EmailStr
    password: str


class AdminSession(BaseModel):
    id: str
    email: EmailStr
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
