"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Boolean, Column, Date, Integer, String
from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # 'admin', 'instructor', or 'student'
    email = Column(String(255), unique=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    pref_name = Column(String(255), nullable=True)
    one_time_password = Column(Boolean, nullable=False, default=False)
    password_expires = Column(Date, nullable=True)  # OTP expiry date
    skill_level = Column(String(20), nullable=True)
