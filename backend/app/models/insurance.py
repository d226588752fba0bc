"""
Modèle SQLAlchemy pour les compagnies d'assurance.
"""

import uuid
from sqlalchemy import Column, Date, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base, utc_now


class Insurance(Base):
    __tablename__ = "insurance"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(100), nullable=True)
    address = Column(Text, nullable=True)
    policy_number = Column(String(100), nullable=True)
    coverage_type = Column(String(100), nullable=True)
    expiry_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
