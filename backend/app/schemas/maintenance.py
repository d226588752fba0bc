"""
Schémas Pydantic pour les demandes de maintenance et les paiements.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from app.schemas.product import VALID_STOCK_LOCATIONS

VALID_MAINTENANCE_STATUSES = {"pending", "in-progress", "completed", "cancelled"}


class ServiceUsed(BaseModel):
    service_id: uuid.UUID
    quantity: int = 1

    @field_validator("quantity")
    @classmethod
    def quantity_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("La quantité doit être positive.")
        return v


class ProductUsed(BaseModel):
    product_id: uuid.UUID
    quantity: int = 1
    stock_source: str = "shop"

    @field_validator("quantity")
    @classmethod
    def quantity_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("La quantité doit être positive.")
        return v

    @field_validator("stock_source")
    @classmethod
    def valid_source(cls, v: str) -> str:
        if v not in VALID_STOCK_LOCATIONS:
            raise ValueError(f"Source de stock invalide. Valeurs acceptées : {VALID_STOCK_LOCATIONS}")
        return v


class MaintenanceCreate(BaseModel):
    car_uin: str
    client_id: uuid.UUID
    services_used: List[ServiceUsed] = []
    products_used: List[ProductUsed] = []
    additional_fee: float = 0
    discount: float = 0
    discount_justification: Optional[str] = None
    paid_amount: float = 0
    start_date: date
    end_date: Optional[date] = None
    status: str = "pending"

    @field_validator("additional_fee", "discount", "paid_amount")
    @classmethod
    def not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Le montant ne peut pas être négatif.")
        return v

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        if v not in VALID_MAINTENANCE_STATUSES:
            raise ValueError(f"Statut invalide. Valeurs acceptées : {VALID_MAINTENANCE_STATUSES}")
        return v


class MaintenanceUpdate(BaseModel):
    services_used: Optional[List[ServiceUsed]] = None
    products_used: Optional[List[ProductUsed]] = None
    additional_fee: Optional[float] = None
    discount: Optional[float] = None
    discount_justification: Optional[str] = None
    paid_amount: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None

    @field_validator("additional_fee", "discount", "paid_amount")
    @classmethod
    def not_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("Le montant ne peut pas être négatif.")
        return v

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_MAINTENANCE_STATUSES:
            raise ValueError(f"Statut invalide. Valeurs acceptées : {VALID_MAINTENANCE_STATUSES}")
        return v


class PaymentCreate(BaseModel):
    amount: float

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Le montant du paiement doit être supérieur à zéro.")
        return v


class ServiceLine(BaseModel):
    service_id: uuid.UUID
    quantity: int
    name: str
    unit_price: float
    cost: float


class ProductLine(BaseModel):
    product_id: uuid.UUID
    quantity: int
    stock_source: str
    name: str
    unit_price: float
    cost: float


class MaintenanceResponse(BaseModel):
    id: uuid.UUID
    car_uin: str
    client_id: uuid.UUID
    services_used: List[ServiceUsed]
    products_used: List[ProductUsed]
    additional_fee: float
    discount: float
    discount_justification: Optional[str]
    total_cost: float
    paid_amount: float
    remaining_balance: float
    payment_status: str
    start_date: date
    end_date: Optional[date]
    status: str
    created_at: datetime
    updated_at: datetime


class MaintenanceDetail(MaintenanceResponse):
    """Demande enrichie : nom du client, véhicule et détail chiffré des lignes."""
    client_name: str
    car_details: str
    service_details: List[ServiceLine]
    product_details: List[ProductLine]
