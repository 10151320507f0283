"""
Back-office accounts
"""
from sqlalchemy import Column, String, Boolean
from core.database import BaseModel


class AdminUser(BaseModel):
    """Admin dashboard login"""
    __tablename__ = "admin_users"
    __table_args__ = {'extend_existing': True}

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    role = Column(String(50), nullable=False, default="admin")
    is_active = Column(Boolean, nullable=False, default=True)
