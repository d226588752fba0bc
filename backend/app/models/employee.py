"""
Modèles SQLAlchemy pour les employés et leurs salaires.
"""

import uuid
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base, utc_now


class Employee(Base):
    __tablename__ = "employees"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    position = Column(String(100), nullable=False)
    hire_date = Column(Date, nullable=False)
    contact = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    base_salary = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class Salary(Base):
    """Versement de salaire pour une période donnée."""
    __tablename__ = "salaries"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    employee_id = Column(UUID(as_uuid=True), ForeignKey("employees.id"), nullable=False)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_period = Column(String(50), nullable=False)   # Ex: "Janvier 2026", "T1 2026"
    notes = Column(Text, nullable=True)
    is_paid = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
