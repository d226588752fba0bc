"""
Modèle SQLAlchemy pour le journal d'audit.

Chaque création, modification ou suppression écrit une entrée avec l'état
avant/après sérialisé en JSON. Les colonnes de référence (client_id, car_uin...)
permettent de filtrer l'historique d'une entité sans parser le JSON.
"""

import uuid
from sqlalchemy import Column, Date, DateTime, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base, utc_now


class LogEntry(Base):
    __tablename__ = "logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    action_type = Column(String(10), nullable=False)     # create, update, delete
    table_name = Column(String(50), nullable=False)
    timestamp = Column(DateTime, nullable=False, default=utc_now)
    admin_name = Column(String(100), nullable=False)
    before_value = Column(Text, nullable=True)
    after_value = Column(Text, nullable=True)

    client_id = Column(String(50), nullable=True)
    car_uin = Column(String(50), nullable=True)
    insurance_id = Column(String(50), nullable=True)
    service_id = Column(String(50), nullable=True)
    product_id = Column(String(50), nullable=True)
    maintenance_id = Column(String(50), nullable=True)

    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    payment_amount = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    discount = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    additional_fees = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    remaining_balance = Column(Numeric(12, 2, asdecimal=False), nullable=True)
