"""
Schémas Pydantic pour les compagnies d'assurance.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from app.schemas.common import not_blank


class InsuranceCreate(BaseModel):
    name: str
    contact_person: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    policy_number: Optional[str] = None
    coverage_type: Optional[str] = None
    expiry_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return not_blank(v, "Le nom de l'assurance")


class InsuranceUpdate(BaseModel):
    name: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    policy_number: Optional[str] = None
    coverage_type: Optional[str] = None
    expiry_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return not_blank(v, "Le nom de l'assurance")


class InsuranceResponse(BaseModel):
    id: uuid.UUID
    name: str
    contact_person: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    policy_number: Optional[str]
    coverage_type: Optional[str]
    expiry_date: Optional[date]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
