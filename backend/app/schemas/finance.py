"""
Schémas Pydantic pour les finances : catégories, écritures et synthèse.
"""

import uuid
import datetime as dt
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator

from app.schemas.common import not_blank

VALID_CATEGORY_TYPES = {"income", "expense"}
VALID_RELATED_ENTITY_TYPES = {"maintenance", "salary", "product", "service", "other"}
VALID_PAYMENT_METHODS = {"cash", "card", "bank_transfer", "check", "other"}


class FinanceCategoryCreate(BaseModel):
    name: str
    type: str
    description: Optional[str] = None
    is_default: bool = False

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return not_blank(v, "Le nom de la catégorie")

    @field_validator("type")
    @classmethod
    def valid_type(cls, v: str) -> str:
        if v not in VALID_CATEGORY_TYPES:
            raise ValueError(f"Type invalide. Valeurs acceptées : {VALID_CATEGORY_TYPES}")
        return v


class FinanceCategoryUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return not_blank(v, "Le nom de la catégorie")

    @field_validator("type")
    @classmethod
    def valid_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_CATEGORY_TYPES:
            raise ValueError(f"Type invalide. Valeurs acceptées : {VALID_CATEGORY_TYPES}")
        return v


class FinanceCategoryResponse(BaseModel):
    id: uuid.UUID
    name: str
    type: str
    description: Optional[str]
    is_default: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FinanceRecordCreate(BaseModel):
    category_id: uuid.UUID
    amount: float
    description: str
    date: dt.date
    reference_number: Optional[str] = None
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None
    payment_method: Optional[str] = None
    attachment_url: Optional[str] = None
    notes: Optional[str] = None
    created_by: str = "System"

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Le montant doit être positif.")
        return v

    @field_validator("description")
    @classmethod
    def description_not_empty(cls, v: str) -> str:
        return not_blank(v, "La description")

    @field_validator("related_entity_type")
    @classmethod
    def valid_related_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_RELATED_ENTITY_TYPES:
            raise ValueError(f"Type d'entité invalide. Valeurs acceptées : {VALID_RELATED_ENTITY_TYPES}")
        return v

    @field_validator("payment_method")
    @classmethod
    def valid_payment_method(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_PAYMENT_METHODS:
            raise ValueError(f"Moyen de paiement invalide. Valeurs acceptées : {VALID_PAYMENT_METHODS}")
        return v


class FinanceRecordUpdate(BaseModel):
    category_id: Optional[uuid.UUID] = None
    amount: Optional[float] = None
    description: Optional[str] = None
    date: Optional[dt.date] = None
    reference_number: Optional[str] = None
    payment_method: Optional[str] = None
    attachment_url: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("Le montant doit être positif.")
        return v

    @field_validator("payment_method")
    @classmethod
    def valid_payment_method(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_PAYMENT_METHODS:
            raise ValueError(f"Moyen de paiement invalide. Valeurs acceptées : {VALID_PAYMENT_METHODS}")
        return v


class FinanceRecordResponse(BaseModel):
    id: uuid.UUID
    category_id: uuid.UUID
    amount: float
    description: str
    date: dt.date
    reference_number: Optional[str]
    related_entity_type: Optional[str]
    related_entity_id: Optional[str]
    payment_method: Optional[str]
    attachment_url: Optional[str]
    notes: Optional[str]
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PeriodTotals(BaseModel):
    period: str
    income: float
    expense: float
    balance: float


class FinancialSummary(BaseModel):
    total_income: float
    total_expense: float
    net_balance: float
    income_by_category: Dict[str, float]
    expense_by_category: Dict[str, float]
    time_series: List[PeriodTotals]
