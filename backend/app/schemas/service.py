"""
Schémas Pydantic pour le catalogue des prestations d'atelier.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from app.schemas.common import not_blank


class ServiceCreate(BaseModel):
    name: str
    description: Optional[str] = None
    standard_fee: float

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return not_blank(v, "Le nom de la prestation")

    @field_validator("standard_fee")
    @classmethod
    def fee_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Le tarif ne peut pas être négatif.")
        return v


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    standard_fee: Optional[float] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return not_blank(v, "Le nom de la prestation")

    @field_validator("standard_fee")
    @classmethod
    def fee_not_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("Le tarif ne peut pas être négatif.")
        return v


class ServiceResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str]
    standard_fee: float
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
