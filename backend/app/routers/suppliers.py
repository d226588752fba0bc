"""
Router pour les fournisseurs.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.supplier import SupplierCreate, SupplierResponse, SupplierUpdate, SupplierWithProducts
from app.services import supplier_service

router = APIRouter(prefix="/api/v1/suppliers", tags=["Fournisseurs"])


@router.post("", response_model=SupplierResponse, status_code=201, summary="Créer un fournisseur")
def create_supplier(data: SupplierCreate, db: Session = Depends(get_db)):
    return supplier_service.create_supplier(db, data)


@router.get("", response_model=List[SupplierResponse], summary="Lister les fournisseurs")
def list_suppliers(db: Session = Depends(get_db)):
    return supplier_service.get_suppliers(db)


@router.get("/{supplier_id}", response_model=SupplierResponse, summary="Détail d'un fournisseur")
def get_supplier(supplier_id: uuid.UUID, db: Session = Depends(get_db)):
    supplier = supplier_service.get_supplier(db, supplier_id)
    if supplier is None:
        raise HTTPException(status_code=404, detail="Fournisseur introuvable.")
    return supplier


@router.get("/{supplier_id}/products", response_model=SupplierWithProducts, summary="Fournisseur et ses produits")
def get_supplier_with_products(supplier_id: uuid.UUID, db: Session = Depends(get_db)):
    result = supplier_service.get_supplier_with_products(db, supplier_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Fournisseur introuvable.")
    return result


@router.put("/{supplier_id}", response_model=SupplierResponse, summary="Modifier un fournisseur")
def update_supplier(supplier_id: uuid.UUID, data: SupplierUpdate, db: Session = Depends(get_db)):
    supplier = supplier_service.update_supplier(db, supplier_id, data)
    if supplier is None:
        raise HTTPException(status_code=404, detail="Fournisseur introuvable.")
    return supplier


@router.delete("/{supplier_id}", status_code=204, summary="Supprimer un fournisseur")
def delete_supplier(supplier_id: uuid.UUID, db: Session = Depends(get_db)):
    """Bloqué tant que des produits sont rattachés au fournisseur."""
    try:
        success = supplier_service.delete_supplier(db, supplier_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not success:
        raise HTTPException(status_code=404, detail="Fournisseur introuvable.")
