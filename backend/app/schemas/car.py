"""
Schémas Pydantic pour les véhicules.

L'ancien formulaire envoie insurance_id="none" pour « sans assurance » :
la valeur est normalisée en None avant validation de l'UUID.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from app.schemas.common import not_blank


def _none_insurance(v: Any) -> Any:
    if v in ("none", ""):
        return None
    return v


class CarCreate(BaseModel):
    uin: str
    license_plate: str
    make: str
    model: str
    year: Optional[int] = None        # année courante si absente
    vin: Optional[str] = None
    color: Optional[str] = None
    client_id: uuid.UUID
    insurance_id: Optional[uuid.UUID] = None

    @field_validator("uin", "license_plate", "make", "model")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return not_blank(v)

    @field_validator("insurance_id", mode="before")
    @classmethod
    def none_means_no_insurance(cls, v: Any) -> Any:
        return _none_insurance(v)


class CarUpdate(BaseModel):
    license_plate: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    vin: Optional[str] = None
    color: Optional[str] = None
    client_id: Optional[uuid.UUID] = None
    insurance_id: Optional[uuid.UUID] = None

    @field_validator("license_plate", "make", "model")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        return not_blank(v)

    @field_validator("insurance_id", mode="before")
    @classmethod
    def none_means_no_insurance(cls, v: Any) -> Any:
        return _none_insurance(v)


class CarResponse(BaseModel):
    uin: str
    license_plate: str
    make: str
    model: str
    year: Optional[int]
    vin: Optional[str]
    color: Optional[str]
    client_id: uuid.UUID
    insurance_id: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CarReportRow(CarResponse):
    """Véhicule enrichi du nom du client (rapports)."""
    client_name: str

