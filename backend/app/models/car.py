"""
Modèle SQLAlchemy pour les véhicules.
La clé primaire est l'UIN (identifiant interne saisi par le garage), pas un UUID.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base, utc_now


class Car(Base):
    __tablename__ = "cars"

    uin = Column(String(50), primary_key=True)                # Ex: "CAR001"
    license_plate = Column(String(50), nullable=False)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=True)
    vin = Column(String(50), nullable=True)
    color = Column(String(50), nullable=True)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id"), nullable=False)
    insurance_id = Column(UUID(as_uuid=True), ForeignKey("insurance.id"), nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
