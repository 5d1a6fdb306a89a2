"""
Engagement Database Models
==========================

Contact messages and demo requests.

Version: 0.1.0
"""

from sqlalchemy import Column, DateTime, Integer, String, Text

from services.portal.models.types import db_enum, utcnow
from shared.database.postgres import Base
from shared.models.engagement import ContactStatus, DemoStatus


class ContactMessageModel(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(db_enum(ContactStatus), nullable=False, default=ContactStatus.NEW)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class DemoRequestModel(Base):
    __tablename__ = "demo_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    company = Column(String(255), nullable=False)
    message = Column(Text)
    status = Column(db_enum(DemoStatus), nullable=False, default=DemoStatus.NEW)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
