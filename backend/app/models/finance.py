"""
Modèles SQLAlchemy pour la comptabilité simplifiée : catégories et écritures.
"""

import uuid
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base, utc_now


class FinanceCategory(Base):
    __tablename__ = "finance_categories"
    __table_args__ = (UniqueConstraint("name", "type", name="uq_finance_category_name_type"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False)         # income, expense
    description = Column(Text, nullable=True)
    is_default = Column(Boolean, default=False)       # Catégorie créée automatiquement par le système
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class FinanceRecord(Base):
    """Écriture de recette ou de dépense."""
    __tablename__ = "finance_records"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    category_id = Column(UUID(as_uuid=True), ForeignKey("finance_categories.id"), nullable=False)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(Date, nullable=False)
    reference_number = Column(String(100), nullable=True)
    related_entity_type = Column(String(20), nullable=True)  # maintenance, salary, product, service, other
    related_entity_id = Column(String(50), nullable=True)
    payment_method = Column(String(20), nullable=True)       # cash, card, bank_transfer, check, other
    attachment_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=False, default="System")
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
