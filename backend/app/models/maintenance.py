"""
Modèles SQLAlchemy pour les demandes de maintenance et leurs lignes
(prestations et produits utilisés).
"""

import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base, utc_now


class MaintenanceRequest(Base):
    __tablename__ = "maintenance_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    car_uin = Column(String(50), ForeignKey("cars.uin"), nullable=False)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id"), nullable=False)

    additional_fee = Column(Numeric(12, 2, asdecimal=False), default=0)
    discount = Column(Numeric(12, 2, asdecimal=False), default=0)
    discount_justification = Column(Text, nullable=True)

    total_cost = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    paid_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    remaining_balance = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    payment_status = Column(String(20), default="pending")   # pending, partial, paid

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    status = Column(String(20), default="pending")           # pending, in-progress, completed, cancelled

    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class MaintenanceService(Base):
    """Prestation utilisée dans une demande de maintenance."""
    __tablename__ = "maintenance_services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    maintenance_id = Column(
        UUID(as_uuid=True), ForeignKey("maintenance_requests.id", ondelete="CASCADE"), nullable=False
    )
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)


class MaintenanceProduct(Base):
    """Produit consommé dans une demande de maintenance, avec l'emplacement de stock débité."""
    __tablename__ = "maintenance_products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    maintenance_id = Column(
        UUID(as_uuid=True), ForeignKey("maintenance_requests.id", ondelete="CASCADE"), nullable=False
    )
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    stock_source = Column(String(20), nullable=False)  # warehouse, shop
