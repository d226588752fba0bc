"""
Service métier des fournisseurs.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.product import Product
from app.models.supplier import Supplier
from app.schemas.product import ProductResponse
from app.schemas.supplier import SupplierCreate, SupplierResponse, SupplierUpdate, SupplierWithProducts
from app.services import log_service


def create_supplier(db: Session, data: SupplierCreate) -> Supplier:
    supplier = Supplier(**data.model_dump())
    db.add(supplier)
    db.flush()
    log_service.record(db, "create", "suppliers", after=supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


def get_suppliers(db: Session) -> list[Supplier]:
    return db.execute(select(Supplier).order_by(Supplier.name)).scalars().all()


def get_supplier(db: Session, supplier_id: uuid.UUID) -> Optional[Supplier]:
    return db.get(Supplier, supplier_id)


def get_supplier_with_products(db: Session, supplier_id: uuid.UUID) -> Optional[SupplierWithProducts]:
    supplier = db.get(Supplier, supplier_id)
    if supplier is None:
        return None

    products = db.execute(
        select(Product).where(Product.supplier_id == supplier_id).order_by(Product.name)
    ).scalars().all()
    return SupplierWithProducts(
        supplier=SupplierResponse.model_validate(supplier),
        products=[ProductResponse.model_validate(p) for p in products],
    )


def update_supplier(db: Session, supplier_id: uuid.UUID, data: SupplierUpdate) -> Optional[Supplier]:
    supplier = db.get(Supplier, supplier_id)
    if supplier is None:
        return None

    before = log_service.snapshot(supplier)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(supplier, field, value)

    log_service.record(db, "update", "suppliers", before=before, after=supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


def delete_supplier(db: Session, supplier_id: uuid.UUID) -> bool:
    """Supprime un fournisseur. Bloqué tant que des produits y sont rattachés."""
    supplier = db.get(Supplier, supplier_id)
    if supplier is None:
        return False

    product_id = db.execute(select(Product.id).where(Product.supplier_id == supplier_id).limit(1)).scalar()
    if product_id:
        raise ValueError("Impossible de supprimer ce fournisseur : des produits y sont rattachés.")

    log_service.record(db, "delete", "suppliers", before=supplier)
    db.delete(supplier)
    db.commit()
    return True
