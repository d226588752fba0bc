"""
Service des rapports : tableau de bord analytique, rapport journalier
et listes par plage de dates.

Les horodatages sont stockés en UTC ; les rapports journaliers et par plage
sont calculés dans le fuseau du garage (REPORT_UTC_OFFSET_HOURS).
"""

import calendar
import uuid
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.models.car import Car
from app.models.client import Client
from app.models.log_entry import LogEntry
from app.models.maintenance import MaintenanceRequest
from app.models.product import Product
from app.schemas.car import CarReportRow
from app.schemas.maintenance import MaintenanceDetail
from app.schemas.report import (
    VALID_ANALYTICS_PERIODS,
    ClientAnalytics,
    DailyReport,
    InventoryAnalytics,
    MaintenanceAnalytics,
    PaymentRow,
    ProductUsageRow,
    ServiceUsageRow,
    StatusDistribution,
    SystemAnalytics,
)
from app.services import maintenance_service
from app.services.date_ranges import local_day_bounds, parse_day

logger = logging.getLogger(__name__)


# ============================================================
# Tableau de bord
# ============================================================

def _months_ago(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def analytics_window(period: str, now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Fenêtre glissante se terminant maintenant : 7 jours, 1 mois ou 1 an."""
    if period not in VALID_ANALYTICS_PERIODS:
        raise ValueError(f"Période invalide. Valeurs acceptées : {VALID_ANALYTICS_PERIODS}")
    now = now or datetime.now()
    if period == "week":
        return now - timedelta(days=7), now
    if period == "month":
        return _months_ago(now, 1), now
    return _months_ago(now, 12), now


def system_analytics(db: Session, period: str = "month") -> SystemAnalytics:
    """
    Indicateurs globaux : maintenances de la période (nombre, chiffre d'affaires,
    encaissé, restant dû, répartition par statut), inventaire, clients et véhicules.
    """
    start, end = analytics_window(period)

    requests = db.execute(
        select(MaintenanceRequest).where(
            MaintenanceRequest.start_date >= start.date(),
            MaintenanceRequest.start_date <= end.date(),
        )
    ).scalars().all()
    products = db.execute(select(Product)).scalars().all()
    clients = db.execute(select(Client)).scalars().all()
    cars = db.execute(select(Car)).scalars().all()

    distribution = StatusDistribution()
    for r in requests:
        key = (r.status or "pending").replace("-", "_")
        if hasattr(distribution, key):
            setattr(distribution, key, getattr(distribution, key) + 1)

    low_stock = [
        p for p in products
        if (p.warehouse_stock or 0) + (p.shop_stock or 0) <= (p.low_stock_threshold or 0)
    ]

    return SystemAnalytics(
        period=period,
        start=start,
        end=end,
        maintenance=MaintenanceAnalytics(
            total=len(requests),
            total_revenue=round(sum(r.total_cost or 0 for r in requests), 2),
            paid_revenue=round(sum(r.paid_amount or 0 for r in requests), 2),
            outstanding_revenue=round(sum(r.remaining_balance or 0 for r in requests), 2),
            status_distribution=distribution,
        ),
        inventory=InventoryAnalytics(
            total_products=len(products),
            low_stock_products=len(low_stock),
            total_warehouse_stock=sum(p.warehouse_stock or 0 for p in products),
            total_shop_stock=sum(p.shop_stock or 0 for p in products),
        ),
        clients=ClientAnalytics(
            total=len(clients),
            cars=len(cars),
            cars_per_client=round(len(cars) / len(clients), 2) if clients else 0,
        ),
    )


# ============================================================
# Rapport journalier
# ============================================================

def daily_report(db: Session, day_str: str) -> DailyReport:
    """
    Activité d'une journée (YYYY-MM-DD) dans le fuseau du garage :
    véhicules enregistrés, prestations et produits utilisés, paiements encaissés
    (lus dans le journal d'audit) et demandes de maintenance créées.
    """
    day = parse_day(day_str)
    first, last = local_day_bounds(day, settings.REPORT_UTC_OFFSET_HOURS)

    new_cars = _cars_between(db, first, last)
    requests = maintenance_service.get_created_between(db, first, last)
    details = [maintenance_service.to_detail(db, r) for r in requests]

    services = []
    products = []
    for request, detail in zip(requests, details):
        for line in detail.service_details:
            services.append(ServiceUsageRow(
                service_id=line.service_id,
                service_name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_cost=line.cost,
                maintenance_id=detail.id,
                client_id=detail.client_id,
                client_name=detail.client_name,
                car_uin=detail.car_uin,
                car_details=detail.car_details,
                timestamp=request.created_at,
            ))
        for line in detail.product_details:
            products.append(ProductUsageRow(
                product_id=line.product_id,
                product_name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_cost=line.cost,
                stock_source=line.stock_source,
                maintenance_id=detail.id,
                client_id=detail.client_id,
                client_name=detail.client_name,
                car_uin=detail.car_uin,
                car_details=detail.car_details,
                timestamp=request.created_at,
            ))

    payments = _payments_between(db, first, last)
    logger.info(
        "Rapport journalier %s : %d véhicule(s), %d maintenance(s), %d paiement(s)",
        day, len(new_cars), len(requests), len(payments),
    )

    return DailyReport(
        date=day,
        new_cars=new_cars,
        services=services,
        products=products,
        payments=payments,
        total_payments=round(sum(p.amount for p in payments), 2),
        maintenance=details,
    )


# ============================================================
# Plages de dates
# ============================================================

def cars_by_date_range(db: Session, start_str: str, end_str: str) -> list[CarReportRow]:
    """Véhicules enregistrés entre deux dates incluses (YYYY-MM-DD, fuseau du garage)."""
    first, last = _local_range(start_str, end_str)
    return _cars_between(db, first, last)


def maintenance_by_date_range(db: Session, start_str: str, end_str: str) -> list[MaintenanceDetail]:
    """Demandes créées entre deux dates incluses (YYYY-MM-DD, fuseau du garage)."""
    first, last = _local_range(start_str, end_str)
    requests = maintenance_service.get_created_between(db, first, last)
    return [maintenance_service.to_detail(db, r) for r in requests]


# ============================================================
# Helpers
# ============================================================

def _local_range(start_str: str, end_str: str) -> tuple[datetime, datetime]:
    start_day = parse_day(start_str)
    end_day = parse_day(end_str)
    if end_day < start_day:
        raise ValueError("La date de fin doit être postérieure à la date de début.")
    offset = settings.REPORT_UTC_OFFSET_HOURS
    return local_day_bounds(start_day, offset)[0], local_day_bounds(end_day, offset)[1]


def _cars_between(db: Session, first: datetime, last: datetime) -> list[CarReportRow]:
    cars = db.execute(
        select(Car)
        .where(Car.created_at >= first, Car.created_at <= last)
        .order_by(Car.created_at)
    ).scalars().all()
    rows = []
    for car in cars:
        client = db.get(Client, car.client_id)
        rows.append(CarReportRow(
            **_car_fields(car),
            client_name=client.name if client else maintenance_service.UNKNOWN_CLIENT,
        ))
    return rows


def _car_fields(car: Car) -> dict:
    return {col.name: getattr(car, col.name) for col in car.__table__.columns}


def _payments_between(db: Session, first: datetime, last: datetime) -> list[PaymentRow]:
    """Paiements = entrées d'audit « update maintenance » portant un montant payé."""
    logs = db.execute(
        select(LogEntry)
        .where(
            LogEntry.action_type == "update",
            LogEntry.table_name == "maintenance",
            LogEntry.payment_amount.is_not(None),
            LogEntry.timestamp >= first,
            LogEntry.timestamp <= last,
        )
        .order_by(LogEntry.timestamp)
    ).scalars().all()

    rows = []
    for log in logs:
        client = _get_by_str_id(db, Client, log.client_id)
        car = db.get(Car, log.car_uin) if log.car_uin else None
        rows.append(PaymentRow(
            maintenance_id=log.maintenance_id,
            amount=log.payment_amount or 0,
            remaining_balance=log.remaining_balance,
            client_id=log.client_id,
            client_name=client.name if client else maintenance_service.UNKNOWN_CLIENT,
            car_uin=log.car_uin,
            car_details=maintenance_service.car_label(car),
            timestamp=log.timestamp,
        ))
    return rows


def _get_by_str_id(db: Session, model, raw_id: Optional[str]):
    """Les colonnes de référence du journal sont des chaînes (données importées comprises)."""
    if not raw_id:
        return None
    try:
        return db.get(model, uuid.UUID(raw_id))
    except ValueError:
        logger.debug("Identifiant non UUID ignoré dans le journal : %s", raw_id)
        return None
