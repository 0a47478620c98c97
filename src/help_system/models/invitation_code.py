"""Invitation code database model.

This module defines the InvitationCode database model using SQLAlchemy.
"""

from sqlalchemy import Column, String
from .base import Base


class InvitationCodeModel(Base):
    """Invitation code database model."""

    __tablename__ = "invitation_codes"

    code = Column(String(255), primary_key=True, index=True)
    role = Column(String(20), nullable=False)  # 'instructor' or 'student'
    created_by = Column(String(255), nullable=True)  # username
    created_at = Column(String, nullable=False)  # ISO format string
    expires_at = Column(String, nullable=True)  # ISO format string
