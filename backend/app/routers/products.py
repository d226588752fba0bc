"""
Router pour les produits et l'inventaire (transferts, ajustements, alertes de stock).
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.common import FieldUpdate
from app.schemas.product import (
    InventoryAdjustment,
    InventoryAdjustmentResult,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    StockTransfer,
)
from app.services import product_service

router = APIRouter(prefix="/api/v1/products", tags=["Produits"])


@router.post("", response_model=ProductResponse, status_code=201, summary="Créer un produit")
def create_product(data: ProductCreate, db: Session = Depends(get_db)):
    """Crée un produit ; un stock initial génère une dépense d'achat d'inventaire."""
    try:
        return product_service.create_product(db, data)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("", response_model=List[ProductResponse], summary="Lister les produits")
def list_products(db: Session = Depends(get_db)):
    return product_service.get_products(db)


@router.get("/low-stock", response_model=List[ProductResponse], summary="Produits en stock bas")
def list_low_stock(db: Session = Depends(get_db)):
    """Produits dont le stock total est au plus égal au seuil d'alerte."""
    return product_service.get_low_stock(db)


@router.get("/{product_id}", response_model=ProductResponse, summary="Détail d'un produit")
def get_product(product_id: uuid.UUID, db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Produit introuvable.")
    return product


@router.put("/{product_id}", response_model=ProductResponse, summary="Modifier un produit")
def update_product(product_id: uuid.UUID, data: ProductUpdate, db: Session = Depends(get_db)):
    try:
        product = product_service.update_product(db, product_id, data)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if product is None:
        raise HTTPException(status_code=404, detail="Produit introuvable.")
    return product


@router.patch("/{product_id}", response_model=ProductResponse, summary="Modifier un champ d'un produit")
def update_product_field(product_id: uuid.UUID, data: FieldUpdate, db: Session = Depends(get_db)):
    """Modification d'une cellule du tableau ; une hausse de stock génère une dépense d'achat."""
    try:
        product = product_service.update_product_field(db, product_id, data)
    except ValueError as e:
        msg = str(e)
        if "introuvable" in msg:
            raise HTTPException(status_code=404, detail=msg)
        raise HTTPException(status_code=400, detail=msg)
    if product is None:
        raise HTTPException(status_code=404, detail="Produit introuvable.")
    return product


@router.post("/{product_id}/transfer", response_model=ProductResponse, summary="Transférer du stock")
def transfer_stock(product_id: uuid.UUID, data: StockTransfer, db: Session = Depends(get_db)):
    """Déplace des unités entre l'entrepôt et la boutique."""
    try:
        product = product_service.transfer_stock(db, product_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if product is None:
        raise HTTPException(status_code=404, detail="Produit introuvable.")
    return product


@router.post("/{product_id}/adjust", response_model=InventoryAdjustmentResult, summary="Ajuster l'inventaire")
def adjust_inventory(product_id: uuid.UUID, data: InventoryAdjustment, db: Session = Depends(get_db)):
    """
    Ajustement manuel du stock (achat, perte, correction).
    Les stocks ne descendent jamais sous zéro.
    """
    try:
        result = product_service.adjust_inventory(db, product_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail="Produit introuvable.")
    return result


@router.delete("/{product_id}", status_code=204, summary="Supprimer un produit")
def delete_product(product_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        success = product_service.delete_product(db, product_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not success:
        raise HTTPException(status_code=404, detail="Produit introuvable.")
