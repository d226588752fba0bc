"""
Schémas Pydantic pour les employés et les salaires.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from app.schemas.common import not_blank


class EmployeeCreate(BaseModel):
    name: str
    position: str
    hire_date: date
    contact: Optional[str] = None
    email: Optional[EmailStr] = None
    base_salary: float = 0
    is_active: bool = True

    @field_validator("name", "position")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return not_blank(v)

    @field_validator("base_salary")
    @classmethod
    def salary_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Le salaire de base ne peut pas être négatif.")
        return v


class EmployeeUpdate(BaseModel):
    name: Optional[str] = None
    position: Optional[str] = None
    hire_date: Optional[date] = None
    contact: Optional[str] = None
    email: Optional[EmailStr] = None
    base_salary: Optional[float] = None
    is_active: Optional[bool] = None

    @field_validator("name", "position")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        return not_blank(v)


class EmployeeResponse(BaseModel):
    id: uuid.UUID
    name: str
    position: str
    hire_date: date
    contact: Optional[str]
    email: Optional[str]
    base_salary: float
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SalaryCreate(BaseModel):
    employee_id: uuid.UUID
    amount: float
    payment_date: date
    payment_period: str
    notes: Optional[str] = None
    is_paid: bool = False

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Le montant du salaire doit être positif.")
        return v

    @field_validator("payment_period")
    @classmethod
    def period_not_empty(cls, v: str) -> str:
        return not_blank(v, "La période de paiement")


class SalaryUpdate(BaseModel):
    employee_id: Optional[uuid.UUID] = None
    amount: Optional[float] = None
    payment_date: Optional[date] = None
    payment_period: Optional[str] = None
    notes: Optional[str] = None
    is_paid: Optional[bool] = None

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("Le montant du salaire doit être positif.")
        return v


class SalaryResponse(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    amount: float
    payment_date: date
    payment_period: str
    notes: Optional[str]
    is_paid: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
