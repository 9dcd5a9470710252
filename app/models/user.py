"""
User (admin account) model
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime

from app.core.db import Base
from app.utils.clock import utc_now

class User(Base):
    __tablename__ = "users"
    
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default="admin")
    name = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    must_change_password = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now)
