"""
Service métier des demandes de maintenance.

Une demande regroupe des prestations (main d'œuvre) et des produits consommés,
chacun débité d'un emplacement de stock (entrepôt ou boutique).

Coût total = Σ tarif × quantité (prestations)
           + Σ prix de vente × quantité (produits)
           + frais additionnels − remise

Le total est toujours recalculé à partir des lignes courantes et des prix
actuels du catalogue. Solde restant = total − montant payé.
"""

import uuid
import logging
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.models.car import Car
from app.models.client import Client
from app.models.maintenance import MaintenanceProduct, MaintenanceRequest, MaintenanceService
from app.models.product import Product
from app.models.service import Service
from app.schemas.maintenance import (
    MaintenanceCreate,
    MaintenanceDetail,
    MaintenanceResponse,
    MaintenanceUpdate,
    PaymentCreate,
    ProductLine,
    ProductUsed,
    ServiceLine,
    ServiceUsed,
)
from app.services import finance_service, log_service

logger = logging.getLogger(__name__)

STOCK_FIELDS = {"warehouse": "warehouse_stock", "shop": "shop_stock"}
UNKNOWN_CLIENT = "Client inconnu"
UNKNOWN_CAR = "Véhicule inconnu"


# ============================================================
# Calculs
# ============================================================

def payment_status(total_cost: float, paid_amount: float) -> str:
    """Solde ≤ 0 → paid ; paiement partiel → partial ; sinon pending."""
    if total_cost - paid_amount <= 0:
        return "paid"
    if paid_amount > 0:
        return "partial"
    return "pending"


def compute_total(
    service_lines: Iterable[tuple[float, int]],
    product_lines: Iterable[tuple[float, int]],
    additional_fee: float,
    discount: float,
) -> float:
    """Total d'une demande à partir de couples (prix unitaire, quantité)."""
    services = sum((fee or 0) * qty for fee, qty in service_lines)
    products = sum((price or 0) * qty for price, qty in product_lines)
    return round(services + products + (additional_fee or 0) - (discount or 0), 2)


def car_label(car: Optional[Car]) -> str:
    if car is None:
        return UNKNOWN_CAR
    return f"{car.make} {car.model} ({car.license_plate})"


# ============================================================
# CRUD
# ============================================================

def create_maintenance(db: Session, data: MaintenanceCreate) -> MaintenanceResponse:
    """
    Crée une demande de maintenance.

    Étapes :
    1. Vérifier le véhicule, le client, les prestations et les produits
    2. Vérifier et débiter le stock de chaque produit à l'emplacement choisi
    3. Calculer le total, le solde et le statut de paiement
    """
    if db.get(Car, data.car_uin) is None:
        raise ValueError("Véhicule introuvable.")
    if db.get(Client, data.client_id) is None:
        raise ValueError("Client introuvable.")

    services = _load_services(db, data.services_used)
    products = _load_products(db, data.products_used)
    _apply_stock_changes(products, returned=[], taken=data.products_used)

    total = compute_total(
        [(services[s.service_id].standard_fee, s.quantity) for s in data.services_used],
        [(products[p.product_id].sale_price, p.quantity) for p in data.products_used],
        data.additional_fee,
        data.discount,
    )

    request = MaintenanceRequest(
        car_uin=data.car_uin,
        client_id=data.client_id,
        additional_fee=data.additional_fee,
        discount=data.discount,
        discount_justification=data.discount_justification,
        total_cost=total,
        paid_amount=data.paid_amount,
        remaining_balance=round(total - data.paid_amount, 2),
        payment_status=payment_status(total, data.paid_amount),
        start_date=data.start_date,
        end_date=data.end_date,
        status=data.status,
    )
    db.add(request)
    db.flush()  # Obtenir l'ID avant d'insérer les lignes

    service_rows = _insert_service_lines(db, request.id, data.services_used)
    product_rows = _insert_product_lines(db, request.id, data.products_used)

    log_service.record(
        db, "create", "maintenance",
        after=request,
        maintenance_id=request.id,
        client_id=request.client_id,
        car_uin=request.car_uin,
        start_date=request.start_date,
        end_date=request.end_date,
        discount=request.discount,
        additional_fees=request.additional_fee,
        remaining_balance=request.remaining_balance,
    )
    db.commit()
    db.refresh(request)

    logger.info(
        "Maintenance créée : %s (véhicule %s), total %.2f",
        request.id, request.car_uin, total,
    )
    return _to_response(request, service_rows, product_rows)


def get_all(db: Session) -> list[MaintenanceResponse]:
    """Toutes les demandes, de la plus récente à la plus ancienne."""
    requests = db.execute(
        select(MaintenanceRequest).order_by(MaintenanceRequest.start_date.desc())
    ).scalars().all()
    return [to_response(db, r) for r in requests]


def get_enriched(db: Session) -> list[MaintenanceDetail]:
    """Toutes les demandes avec nom du client, véhicule et lignes chiffrées."""
    requests = db.execute(
        select(MaintenanceRequest).order_by(MaintenanceRequest.start_date.desc())
    ).scalars().all()
    return [to_detail(db, r) for r in requests]


def get_maintenance(db: Session, maintenance_id: uuid.UUID) -> Optional[MaintenanceResponse]:
    request = db.get(MaintenanceRequest, maintenance_id)
    if request is None:
        return None
    return to_response(db, request)


def get_maintenance_detail(db: Session, maintenance_id: uuid.UUID) -> Optional[MaintenanceDetail]:
    request = db.get(MaintenanceRequest, maintenance_id)
    if request is None:
        return None
    return to_detail(db, request)


def update_maintenance(
    db: Session, maintenance_id: uuid.UUID, data: MaintenanceUpdate
) -> Optional[MaintenanceResponse]:
    """
    Met à jour une demande.
    Si products_used est fourni, les anciennes quantités sont remises en stock
    avant de débiter les nouvelles. Le total, le solde et le statut de paiement
    sont recalculés dans tous les cas.
    """
    request = db.get(MaintenanceRequest, maintenance_id)
    if request is None:
        return None

    before = log_service.snapshot(request)
    service_rows = _service_rows(db, request.id)
    product_rows = _product_rows(db, request.id)

    if data.services_used is not None:
        _load_services(db, data.services_used)
        db.execute(delete(MaintenanceService).where(MaintenanceService.maintenance_id == request.id))
        service_rows = _insert_service_lines(db, request.id, data.services_used)

    if data.products_used is not None:
        returned = [ProductUsed(product_id=r.product_id, quantity=r.quantity, stock_source=r.stock_source)
                    for r in product_rows]
        products = _load_products(db, data.products_used, extra_ids=[r.product_id for r in returned])
        _apply_stock_changes(products, returned=returned, taken=data.products_used)
        db.execute(delete(MaintenanceProduct).where(MaintenanceProduct.maintenance_id == request.id))
        product_rows = _insert_product_lines(db, request.id, data.products_used)

    scalar_changes = data.model_dump(exclude_unset=True, exclude={"services_used", "products_used"})
    for field, value in scalar_changes.items():
        if value is None and field not in ("discount_justification", "end_date"):
            continue
        setattr(request, field, value)

    _recompute(db, request, service_rows, product_rows)

    log_service.record(
        db, "update", "maintenance",
        before=before,
        after=request,
        maintenance_id=request.id,
        client_id=request.client_id,
        car_uin=request.car_uin,
        start_date=request.start_date,
        end_date=request.end_date,
        discount=request.discount,
        additional_fees=request.additional_fee,
        remaining_balance=request.remaining_balance,
    )
    db.commit()
    db.refresh(request)
    return _to_response(request, service_rows, product_rows)


def delete_maintenance(db: Session, maintenance_id: uuid.UUID) -> bool:
    """Supprime une demande et remet en stock les produits qu'elle avait consommés."""
    request = db.get(MaintenanceRequest, maintenance_id)
    if request is None:
        return False

    product_rows = _product_rows(db, request.id)
    for row in product_rows:
        product = db.get(Product, row.product_id)
        if product is None:
            logger.debug("Produit %s disparu, remise en stock ignorée", row.product_id)
            continue
        field = STOCK_FIELDS[row.stock_source]
        setattr(product, field, (getattr(product, field) or 0) + row.quantity)

    log_service.record(
        db, "delete", "maintenance",
        before=request,
        maintenance_id=request.id,
        client_id=request.client_id,
        car_uin=request.car_uin,
    )
    db.execute(delete(MaintenanceProduct).where(MaintenanceProduct.maintenance_id == request.id))
    db.execute(delete(MaintenanceService).where(MaintenanceService.maintenance_id == request.id))
    db.delete(request)
    db.commit()
    logger.info("Maintenance supprimée : %s (%d ligne(s) produit remises en stock)", maintenance_id, len(product_rows))
    return True


def make_payment(db: Session, maintenance_id: uuid.UUID, data: PaymentCreate) -> Optional[MaintenanceResponse]:
    """
    Enregistre un paiement : met à jour le montant payé, le solde et le statut,
    crée une recette « Maintenance Payments » et une entrée d'audit portant
    le montant payé et le solde restant.
    """
    request = db.get(MaintenanceRequest, maintenance_id)
    if request is None:
        return None
    if data.amount <= 0:
        raise ValueError("Le montant du paiement doit être supérieur à zéro.")

    before = log_service.snapshot(request)
    request.paid_amount = round((request.paid_amount or 0) + data.amount, 2)
    request.remaining_balance = round((request.total_cost or 0) - request.paid_amount, 2)
    request.payment_status = payment_status(request.total_cost or 0, request.paid_amount)

    client = db.get(Client, request.client_id)
    car = db.get(Car, request.car_uin)
    client_name = client.name if client else UNKNOWN_CLIENT
    finance_service.book_record(
        db,
        finance_service.MAINTENANCE_PAYMENTS,
        amount=data.amount,
        description=f"Paiement maintenance #{str(request.id)[:8]} - {client_name} - {car_label(car)}",
        related_entity_type="maintenance",
        related_entity_id=request.id,
        payment_method="cash",
        notes=f"Coût total de la maintenance : {request.total_cost:.2f}",
    )

    log_service.record(
        db, "update", "maintenance",
        before=before,
        after=request,
        maintenance_id=request.id,
        client_id=request.client_id,
        car_uin=request.car_uin,
        payment_amount=data.amount,
        remaining_balance=request.remaining_balance,
    )
    db.commit()
    db.refresh(request)

    logger.info(
        "Paiement de %.2f sur la maintenance %s, solde %.2f (%s)",
        data.amount, request.id, request.remaining_balance, request.payment_status,
    )
    return to_response(db, request)


# ============================================================
# Conversion
# ============================================================

def to_response(db: Session, request: MaintenanceRequest) -> MaintenanceResponse:
    return _to_response(request, _service_rows(db, request.id), _product_rows(db, request.id))


def to_detail(db: Session, request: MaintenanceRequest) -> MaintenanceDetail:
    """Demande enrichie : nom du client, véhicule et coût de chaque ligne aux prix actuels."""
    service_rows = _service_rows(db, request.id)
    product_rows = _product_rows(db, request.id)
    client = db.get(Client, request.client_id)
    car = db.get(Car, request.car_uin)

    service_details = []
    for row in service_rows:
        service = db.get(Service, row.service_id)
        fee = (service.standard_fee or 0) if service else 0
        service_details.append(ServiceLine(
            service_id=row.service_id,
            quantity=row.quantity,
            name=service.name if service else "Prestation inconnue",
            unit_price=fee,
            cost=round(fee * row.quantity, 2),
        ))

    product_details = []
    for row in product_rows:
        product = db.get(Product, row.product_id)
        price = (product.sale_price or 0) if product else 0
        product_details.append(ProductLine(
            product_id=row.product_id,
            quantity=row.quantity,
            stock_source=row.stock_source,
            name=product.name if product else "Produit inconnu",
            unit_price=price,
            cost=round(price * row.quantity, 2),
        ))

    base = _to_response(request, service_rows, product_rows)
    return MaintenanceDetail(
        **base.model_dump(),
        client_name=client.name if client else UNKNOWN_CLIENT,
        car_details=car_label(car),
        service_details=service_details,
        product_details=product_details,
    )


def _to_response(
    request: MaintenanceRequest,
    service_rows: list[MaintenanceService],
    product_rows: list[MaintenanceProduct],
) -> MaintenanceResponse:
    return MaintenanceResponse(
        id=request.id,
        car_uin=request.car_uin,
        client_id=request.client_id,
        services_used=[ServiceUsed(service_id=r.service_id, quantity=r.quantity) for r in service_rows],
        products_used=[
            ProductUsed(product_id=r.product_id, quantity=r.quantity, stock_source=r.stock_source)
            for r in product_rows
        ],
        additional_fee=request.additional_fee or 0,
        discount=request.discount or 0,
        discount_justification=request.discount_justification,
        total_cost=request.total_cost or 0,
        paid_amount=request.paid_amount or 0,
        remaining_balance=request.remaining_balance or 0,
        payment_status=request.payment_status,
        start_date=request.start_date,
        end_date=request.end_date,
        status=request.status,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


# ============================================================
# Helpers
# ============================================================

def _service_rows(db: Session, maintenance_id: uuid.UUID) -> list[MaintenanceService]:
    return db.execute(
        select(MaintenanceService)
        .where(MaintenanceService.maintenance_id == maintenance_id)
        .order_by(MaintenanceService.id)
    ).scalars().all()


def _product_rows(db: Session, maintenance_id: uuid.UUID) -> list[MaintenanceProduct]:
    return db.execute(
        select(MaintenanceProduct)
        .where(MaintenanceProduct.maintenance_id == maintenance_id)
        .order_by(MaintenanceProduct.id)
    ).scalars().all()


def _load_services(db: Session, lines: list[ServiceUsed]) -> dict[uuid.UUID, Service]:
    services = {}
    for line in lines:
        service = db.get(Service, line.service_id)
        if service is None:
            raise ValueError(f"Prestation introuvable : {line.service_id}")
        services[line.service_id] = service
    return services


def _load_products(
    db: Session, lines: list[ProductUsed], extra_ids: Iterable[uuid.UUID] = ()
) -> dict[uuid.UUID, Product]:
    """Charge les produits demandés (obligatoires) et ceux à remettre en stock (si encore présents)."""
    products = {}
    for line in lines:
        product = db.get(Product, line.product_id)
        if product is None:
            raise ValueError(f"Produit introuvable : {line.product_id}")
        products[line.product_id] = product
    for product_id in extra_ids:
        if product_id not in products:
            product = db.get(Product, product_id)
            if product is not None:
                products[product_id] = product
    return products


def _apply_stock_changes(
    products: dict[uuid.UUID, Product],
    returned: list[ProductUsed],
    taken: list[ProductUsed],
) -> None:
    """
    Remet en stock `returned` puis débite `taken`.
    Tout est vérifié avant la moindre modification : en cas de stock
    insuffisant, aucun produit n'est touché.
    """
    delta = defaultdict(int)
    for line in returned:
        if line.product_id in products:
            delta[(line.product_id, line.stock_source)] += line.quantity
    for line in taken:
        delta[(line.product_id, line.stock_source)] -= line.quantity

    for (product_id, source), change in delta.items():
        product = products[product_id]
        available = getattr(product, STOCK_FIELDS[source]) or 0
        if available + change < 0:
            raise ValueError(
                f"Stock insuffisant pour {product.name} ({source}) : "
                f"{available} disponible(s), {-change} demandé(s)."
            )

    for (product_id, source), change in delta.items():
        product = products[product_id]
        field = STOCK_FIELDS[source]
        setattr(product, field, (getattr(product, field) or 0) + change)


def _insert_service_lines(db: Session, maintenance_id: uuid.UUID, lines: list[ServiceUsed]) -> list[MaintenanceService]:
    rows = [MaintenanceService(maintenance_id=maintenance_id, service_id=l.service_id, quantity=l.quantity) for l in lines]
    db.add_all(rows)
    return rows


def _insert_product_lines(db: Session, maintenance_id: uuid.UUID, lines: list[ProductUsed]) -> list[MaintenanceProduct]:
    rows = [
        MaintenanceProduct(
            maintenance_id=maintenance_id,
            product_id=l.product_id,
            quantity=l.quantity,
            stock_source=l.stock_source,
        )
        for l in lines
    ]
    db.add_all(rows)
    return rows


def _recompute(
    db: Session,
    request: MaintenanceRequest,
    service_rows: list[MaintenanceService],
    product_rows: list[MaintenanceProduct],
) -> None:
    """Recalcule total, solde et statut de paiement aux prix actuels du catalogue."""
    service_prices = []
    for row in service_rows:
        service = db.get(Service, row.service_id)
        service_prices.append((service.standard_fee if service else 0, row.quantity))
    product_prices = []
    for row in product_rows:
        product = db.get(Product, row.product_id)
        product_prices.append((product.sale_price if product else 0, row.quantity))

    total = compute_total(service_prices, product_prices, request.additional_fee, request.discount)
    paid = request.paid_amount or 0
    request.total_cost = total
    request.remaining_balance = round(total - paid, 2)
    request.payment_status = payment_status(total, paid)


def get_created_between(db: Session, first: datetime, last: datetime) -> list[MaintenanceRequest]:
    """Demandes créées dans l'intervalle [first, last] (horodatages UTC)."""
    return db.execute(
        select(MaintenanceRequest)
        .where(MaintenanceRequest.created_at >= first, MaintenanceRequest.created_at <= last)
        .order_by(MaintenanceRequest.created_at.desc())
    ).scalars().all()
