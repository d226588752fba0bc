"""
Schémas Pydantic pour le journal d'audit.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

VALID_ACTION_TYPES = {"create", "update", "delete"}


class LogEntryResponse(BaseModel):
    id: uuid.UUID
    action_type: str
    table_name: str
    timestamp: datetime
    admin_name: str
    before_value: Optional[str] = None
    after_value: Optional[str] = None
    client_id: Optional[str] = None
    car_uin: Optional[str] = None
    insurance_id: Optional[str] = None
    service_id: Optional[str] = None
    product_id: Optional[str] = None
    maintenance_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    payment_amount: Optional[float] = None
    discount: Optional[float] = None
    additional_fees: Optional[float] = None
    remaining_balance: Optional[float] = None

    model_config = {"from_attributes": True}


class LogFilter(BaseModel):
    """Filtres d'égalité stricte appliqués à l'historique (champs absents ignorés)."""
    action_type: Optional[str] = None
    table_name: Optional[str] = None
    admin_name: Optional[str] = None
    client_id: Optional[str] = None
    car_uin: Optional[str] = None
    insurance_id: Optional[str] = None
    service_id: Optional[str] = None
    product_id: Optional[str] = None
    maintenance_id: Optional[str] = None

    @field_validator("action_type")
    @classmethod
    def valid_action(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_ACTION_TYPES:
            raise ValueError(f"Action invalide. Valeurs acceptées : {VALID_ACTION_TYPES}")
        return v
