"""
Service métier des produits et de l'inventaire.

Deux emplacements de stock : l'entrepôt (warehouse) et la boutique (shop).
Toute hausse de stock hors transfert est considérée comme un achat et génère
une dépense « Inventory Purchases » valorisée au prix d'achat.
"""

import uuid
import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.maintenance import MaintenanceProduct
from app.models.product import Product
from app.models.supplier import Supplier
from app.schemas.common import FieldUpdate
from app.schemas.product import (
    InventoryAdjustment,
    InventoryAdjustmentResult,
    ProductCreate,
    ProductUpdate,
    StockTransfer,
)
from app.services import finance_service, log_service

logger = logging.getLogger(__name__)

STOCK_FIELDS = {"warehouse": "warehouse_stock", "shop": "shop_stock"}


def create_product(db: Session, data: ProductCreate) -> Product:
    """
    Crée un produit rattaché à un fournisseur existant.
    Un stock initial non nul génère une dépense d'achat d'inventaire.
    """
    if db.get(Supplier, data.supplier_id) is None:
        raise ValueError("Fournisseur introuvable.")

    product = Product(**data.model_dump())
    db.add(product)
    db.flush()

    initial_units = data.warehouse_stock + data.shop_stock
    if initial_units > 0:
        _book_purchase(db, product, initial_units, "Stock initial")

    log_service.record(db, "create", "products", after=product, product_id=product.id)
    db.commit()
    db.refresh(product)
    logger.info("Produit créé : %s (%d unités)", product.name, initial_units)
    return product


def get_products(db: Session) -> list[Product]:
    return db.execute(select(Product).order_by(Product.name)).scalars().all()


def get_product(db: Session, product_id: uuid.UUID) -> Optional[Product]:
    return db.get(Product, product_id)


def get_low_stock(db: Session) -> list[Product]:
    """Produits dont le stock total (entrepôt + boutique) est au plus égal au seuil d'alerte."""
    return db.execute(
        select(Product)
        .where(Product.warehouse_stock + Product.shop_stock <= Product.low_stock_threshold)
        .order_by(Product.name)
    ).scalars().all()


def update_product(db: Session, product_id: uuid.UUID, data: ProductUpdate) -> Optional[Product]:
    """
    Met à jour les champs fournis.
    Chaque hausse d'un champ de stock génère une dépense d'achat pour la différence.
    """
    product = db.get(Product, product_id)
    if product is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    if changes.get("supplier_id") is not None and db.get(Supplier, changes["supplier_id"]) is None:
        raise ValueError("Fournisseur introuvable.")

    before = log_service.snapshot(product)
    for field, value in changes.items():
        if value is None and field != "description":
            continue
        if field in STOCK_FIELDS.values():
            increase = value - (getattr(product, field) or 0)
            if increase > 0:
                location = "entrepôt" if field == "warehouse_stock" else "boutique"
                _book_purchase(db, product, increase, f"Réapprovisionnement {location}")
        setattr(product, field, value)

    log_service.record(db, "update", "products", before=before, after=product, product_id=product.id)
    db.commit()
    db.refresh(product)
    return product


def update_product_field(db: Session, product_id: uuid.UUID, data: FieldUpdate) -> Optional[Product]:
    """Modification d'un seul champ (cellule éditable) ; le champ doit exister sur ProductUpdate."""
    if data.field not in ProductUpdate.model_fields:
        raise ValueError(f"Champ non modifiable : {data.field}")
    try:
        update = ProductUpdate.model_validate({data.field: data.value})
    except ValidationError as e:
        raise ValueError(f"Valeur invalide pour {data.field} : {e.errors()[0]['msg']}")
    return update_product(db, product_id, update)


def transfer_stock(db: Session, product_id: uuid.UUID, data: StockTransfer) -> Optional[Product]:
    """Déplace des unités entre l'entrepôt et la boutique (aucune écriture financière)."""
    product = db.get(Product, product_id)
    if product is None:
        return None

    source = STOCK_FIELDS[data.from_location]
    target = STOCK_FIELDS[data.to_location]
    available = getattr(product, source) or 0
    if available < data.quantity:
        raise ValueError(
            f"Stock insuffisant : {available} unité(s) disponible(s) "
            f"({data.from_location}), {data.quantity} demandée(s)."
        )

    before = log_service.snapshot(product)
    setattr(product, source, available - data.quantity)
    setattr(product, target, (getattr(product, target) or 0) + data.quantity)

    log_service.record(db, "update", "products", before=before, after=product, product_id=product.id)
    db.commit()
    db.refresh(product)
    logger.info(
        "Transfert de %d unité(s) de %s : %s → %s",
        data.quantity, product.name, data.from_location, data.to_location,
    )
    return product


def adjust_inventory(db: Session, product_id: uuid.UUID, data: InventoryAdjustment) -> Optional[InventoryAdjustmentResult]:
    """
    Ajuste manuellement le stock (les stocks ne descendent jamais sous 0).

    - is_expense et hausse nette → dépense d'achat (prix d'achat × unités)
    - sinon, baisse nette → dépense d'ajustement (perte valorisée au prix d'achat)
    """
    product = db.get(Product, product_id)
    if product is None:
        return None
    if data.warehouse_adjustment == 0 and data.shop_adjustment == 0:
        raise ValueError("Au moins un ajustement non nul est requis.")

    before = log_service.snapshot(product)
    old_warehouse = product.warehouse_stock or 0
    old_shop = product.shop_stock or 0
    product.warehouse_stock = max(0, old_warehouse + data.warehouse_adjustment)
    product.shop_stock = max(0, old_shop + data.shop_adjustment)

    applied_warehouse = product.warehouse_stock - old_warehouse
    applied_shop = product.shop_stock - old_shop
    net = applied_warehouse + applied_shop

    if data.is_expense and net > 0:
        _book_purchase(db, product, net, data.reason)
    elif not data.is_expense and net < 0 and (product.purchase_price or 0) > 0:
        finance_service.book_record(
            db,
            finance_service.INVENTORY_ADJUSTMENTS,
            amount=product.purchase_price * -net,
            description=f"Ajustement de stock : {product.name} ({net} unités) - {data.reason}",
            related_entity_type="product",
            related_entity_id=product.id,
        )

    log_service.record(db, "update", "products", before=before, after=product, product_id=product.id)
    db.commit()
    db.refresh(product)
    logger.info("Inventaire ajusté pour %s : %+d (%s)", product.name, net, data.reason)

    return InventoryAdjustmentResult(
        product_id=product.id,
        warehouse_adjustment=applied_warehouse,
        shop_adjustment=applied_shop,
        total_adjustment=net,
    )


def delete_product(db: Session, product_id: uuid.UUID) -> bool:
    """Supprime un produit. Bloqué tant qu'une demande de maintenance l'utilise."""
    product = db.get(Product, product_id)
    if product is None:
        return False

    used = db.execute(
        select(MaintenanceProduct.id).where(MaintenanceProduct.product_id == product_id).limit(1)
    ).scalar()
    if used:
        raise ValueError("Impossible de supprimer ce produit : il est utilisé dans des demandes de maintenance.")

    log_service.record(db, "delete", "products", before=product, product_id=product.id)
    db.delete(product)
    db.commit()
    return True


def _book_purchase(db: Session, product: Product, units: int, reason: str) -> None:
    amount = (product.purchase_price or 0) * units
    if amount <= 0:
        logger.debug("Achat de %s non valorisé (prix d'achat nul)", product.name)
        return
    finance_service.book_record(
        db,
        finance_service.INVENTORY_PURCHASES,
        amount=amount,
        description=f"{reason} : {product.name} ({units} unités)",
        related_entity_type="product",
        related_entity_id=product.id,
    )
