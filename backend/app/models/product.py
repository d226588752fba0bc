"""
Modèle SQLAlchemy pour les produits (pièces détachées, consommables).
Le stock est réparti entre l'entrepôt et la boutique.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base, utc_now


class Product(Base):
    __tablename__ = "products"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    purchase_price = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)  # Prix d'achat fournisseur
    sale_price = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)      # Prix facturé au client
    warehouse_stock = Column(Integer, nullable=False, default=0)
    shop_stock = Column(Integer, nullable=False, default=0)
    supplier_id = Column(UUID(as_uuid=True), ForeignKey("suppliers.id"), nullable=False)
    low_stock_threshold = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
