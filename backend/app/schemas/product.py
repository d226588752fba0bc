"""
Schémas Pydantic pour les produits et les mouvements de stock.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from app.schemas.common import not_blank

VALID_STOCK_LOCATIONS = {"warehouse", "shop"}


class ProductCreate(BaseModel):
    name: str
    description: Optional[str] = None
    purchase_price: float = 0
    sale_price: float = 0
    warehouse_stock: int = 0
    shop_stock: int = 0
    supplier_id: uuid.UUID
    low_stock_threshold: int = 0

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return not_blank(v, "Le nom du produit")

    @field_validator("purchase_price", "sale_price", "warehouse_stock", "shop_stock", "low_stock_threshold")
    @classmethod
    def not_negative(cls, v):
        if v < 0:
            raise ValueError("La valeur ne peut pas être négative.")
        return v


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    purchase_price: Optional[float] = None
    sale_price: Optional[float] = None
    warehouse_stock: Optional[int] = None
    shop_stock: Optional[int] = None
    supplier_id: Optional[uuid.UUID] = None
    low_stock_threshold: Optional[int] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return not_blank(v, "Le nom du produit")

    @field_validator("purchase_price", "sale_price", "warehouse_stock", "shop_stock", "low_stock_threshold")
    @classmethod
    def not_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("La valeur ne peut pas être négative.")
        return v


class ProductResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str]
    purchase_price: float
    sale_price: float
    warehouse_stock: int
    shop_stock: int
    supplier_id: uuid.UUID
    low_stock_threshold: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class StockTransfer(BaseModel):
    """Transfert de stock entre l'entrepôt et la boutique."""
    quantity: int
    from_location: str
    to_location: str

    @field_validator("quantity")
    @classmethod
    def quantity_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("La quantité à transférer doit être positive.")
        return v

    @field_validator("from_location", "to_location")
    @classmethod
    def valid_location(cls, v: str) -> str:
        if v not in VALID_STOCK_LOCATIONS:
            raise ValueError(f"Emplacement invalide. Valeurs acceptées : {VALID_STOCK_LOCATIONS}")
        return v

    @model_validator(mode="after")
    def distinct_locations(self) -> "StockTransfer":
        if self.from_location == self.to_location:
            raise ValueError("Impossible de transférer vers le même emplacement.")
        return self


class InventoryAdjustment(BaseModel):
    """
    Ajustement manuel du stock.
    is_expense=True : achat (hausse du stock) → dépense d'achat d'inventaire.
    is_expense=False : perte, casse, correction (baisse du stock) → dépense d'ajustement.
    """
    warehouse_adjustment: int = 0
    shop_adjustment: int = 0
    reason: str
    is_expense: bool = False

    @field_validator("reason")
    @classmethod
    def reason_not_empty(cls, v: str) -> str:
        return not_blank(v, "La raison de l'ajustement")


class InventoryAdjustmentResult(BaseModel):
    product_id: uuid.UUID
    warehouse_adjustment: int
    shop_adjustment: int
    total_adjustment: int
