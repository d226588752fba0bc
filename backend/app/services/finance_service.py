"""
Service métier des finances : catégories, écritures, synthèse et exports CSV.

Les autres services (produits, maintenance, salaires) passent par
`book_record()` pour enregistrer les recettes et dépenses automatiques
dans une catégorie système créée à la volée.
"""

import csv
import io
import logging
import uuid
from collections import defaultdict
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.employee import Employee
from app.models.finance import FinanceCategory, FinanceRecord
from app.schemas.finance import (
    FinanceCategoryCreate,
    FinanceCategoryUpdate,
    FinanceRecordCreate,
    FinanceRecordUpdate,
    FinancialSummary,
    PeriodTotals,
)
from app.services import log_service
from app.services.date_ranges import period_key, resolve_range

logger = logging.getLogger(__name__)

# Catégories système : (nom, type, description)
INVENTORY_PURCHASES = ("Inventory Purchases", "expense", "Achats de stock auprès des fournisseurs")
INVENTORY_ADJUSTMENTS = ("Inventory Adjustments", "expense", "Pertes, casse et corrections de stock")
MAINTENANCE_PAYMENTS = ("Maintenance Payments", "income", "Paiements reçus pour les maintenances")
EMPLOYEE_SALARIES = ("Employee Salaries", "expense", "Salaires versés aux employés")


# ============================================================
# Catégories
# ============================================================

def _find_category(db: Session, name: str, type: str) -> Optional[FinanceCategory]:
    return db.execute(
        select(FinanceCategory).where(FinanceCategory.name == name, FinanceCategory.type == type)
    ).scalars().first()


def get_or_create_category(db: Session, name: str, type: str, description: Optional[str] = None) -> FinanceCategory:
    """Retourne la catégorie (nom, type) ou la crée comme catégorie système."""
    category = _find_category(db, name, type)
    if category is not None:
        return category

    category = FinanceCategory(name=name, type=type, description=description, is_default=True)
    db.add(category)
    db.flush()
    logger.info("Catégorie financière système créée : %s (%s)", name, type)
    return category


def create_category(db: Session, data: FinanceCategoryCreate) -> FinanceCategory:
    """Crée une catégorie. Lève ValueError si le couple (nom, type) existe déjà."""
    if _find_category(db, data.name, data.type) is not None:
        raise ValueError(f"La catégorie '{data.name}' ({data.type}) existe déjà.")

    category = FinanceCategory(**data.model_dump())
    db.add(category)
    db.flush()
    log_service.record(db, "create", "finance_categories", after=category)
    db.commit()
    db.refresh(category)
    return category


def get_categories(db: Session, type: Optional[str] = None) -> list[FinanceCategory]:
    query = select(FinanceCategory).order_by(FinanceCategory.name)
    if type is not None:
        query = query.where(FinanceCategory.type == type)
    return db.execute(query).scalars().all()


def get_category(db: Session, category_id: uuid.UUID) -> Optional[FinanceCategory]:
    return db.get(FinanceCategory, category_id)


def update_category(db: Session, category_id: uuid.UUID, data: FinanceCategoryUpdate) -> Optional[FinanceCategory]:
    category = db.get(FinanceCategory, category_id)
    if category is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    name = changes.get("name") or category.name
    type = changes.get("type") or category.type
    existing = _find_category(db, name, type)
    if existing is not None and existing.id != category.id:
        raise ValueError(f"La catégorie '{name}' ({type}) existe déjà.")

    before = log_service.snapshot(category)
    for field, value in changes.items():
        setattr(category, field, value)

    log_service.record(db, "update", "finance_categories", before=before, after=category)
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: uuid.UUID) -> bool:
    """
    Supprime une catégorie.
    Bloqué tant que des écritures y sont rattachées.
    """
    category = db.get(FinanceCategory, category_id)
    if category is None:
        return False

    used = db.execute(
        select(FinanceRecord.id).where(FinanceRecord.category_id == category_id).limit(1)
    ).scalar()
    if used:
        raise ValueError("Impossible de supprimer cette catégorie : des écritures y sont rattachées.")

    log_service.record(db, "delete", "finance_categories", before=category)
    db.delete(category)
    db.commit()
    return True


# ============================================================
# Écritures
# ============================================================

def create_record(db: Session, data: FinanceRecordCreate) -> FinanceRecord:
    """Crée une écriture. La catégorie doit exister."""
    if db.get(FinanceCategory, data.category_id) is None:
        raise ValueError("Catégorie financière introuvable.")

    record = FinanceRecord(**data.model_dump())
    db.add(record)
    db.flush()
    log_service.record(db, "create", "finance_records", after=record)
    db.commit()
    db.refresh(record)
    return record


def book_record(
    db: Session,
    category: tuple,
    amount: float,
    description: str,
    related_entity_type: str,
    related_entity_id,
    payment_method: Optional[str] = None,
    reference_number: Optional[str] = None,
    notes: Optional[str] = None,
    on_date: Optional[date] = None,
) -> FinanceRecord:
    """
    Écriture automatique dans une catégorie système (sans commit).
    `category` est l'un des tuples INVENTORY_PURCHASES, MAINTENANCE_PAYMENTS...
    """
    name, type, cat_description = category
    finance_category = get_or_create_category(db, name, type, cat_description)
    record = FinanceRecord(
        category_id=finance_category.id,
        amount=round(amount, 2),
        description=description,
        date=on_date or date.today(),
        related_entity_type=related_entity_type,
        related_entity_id=str(related_entity_id),
        payment_method=payment_method,
        reference_number=reference_number,
        notes=notes,
    )
    db.add(record)
    logger.info("Écriture %s : %.2f (%s)", name, amount, description)
    return record


def get_records(
    db: Session,
    category_id: Optional[uuid.UUID] = None,
    type: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    granularity: str = "day",
) -> list[FinanceRecord]:
    """Écritures, de la plus récente à la plus ancienne, filtrées par catégorie, type ou période."""
    query = select(FinanceRecord)
    if category_id is not None:
        query = query.where(FinanceRecord.category_id == category_id)
    if type is not None:
        query = query.join(FinanceCategory, FinanceCategory.id == FinanceRecord.category_id).where(
            FinanceCategory.type == type
        )
    if start is not None:
        first, last = resolve_range(start, end, granularity)
        query = query.where(FinanceRecord.date >= first.date(), FinanceRecord.date <= last.date())
    return db.execute(query.order_by(FinanceRecord.date.desc())).scalars().all()


def get_record(db: Session, record_id: uuid.UUID) -> Optional[FinanceRecord]:
    return db.get(FinanceRecord, record_id)


def update_record(db: Session, record_id: uuid.UUID, data: FinanceRecordUpdate) -> Optional[FinanceRecord]:
    record = db.get(FinanceRecord, record_id)
    if record is None:
        return None

    if data.category_id is not None and db.get(FinanceCategory, data.category_id) is None:
        raise ValueError("Catégorie financière introuvable.")

    before = log_service.snapshot(record)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(record, field, value)

    log_service.record(db, "update", "finance_records", before=before, after=record)
    db.commit()
    db.refresh(record)
    return record


def delete_record(db: Session, record_id: uuid.UUID) -> bool:
    record = db.get(FinanceRecord, record_id)
    if record is None:
        return False

    log_service.record(db, "delete", "finance_records", before=record)
    db.delete(record)
    db.commit()
    return True


def delete_records_for(db: Session, related_entity_type: str, related_entity_id) -> int:
    """Supprime (sans commit) les écritures liées à une entité. Retourne le nombre supprimé."""
    records = db.execute(
        select(FinanceRecord).where(
            FinanceRecord.related_entity_type == related_entity_type,
            FinanceRecord.related_entity_id == str(related_entity_id),
        )
    ).scalars().all()
    for record in records:
        log_service.record(db, "delete", "finance_records", before=record)
        db.delete(record)
    return len(records)


# ============================================================
# Synthèse
# ============================================================

def financial_summary(
    db: Session,
    start: date,
    end: Optional[date] = None,
    granularity: str = "month",
) -> FinancialSummary:
    """
    Totaux recettes / dépenses d'une période, ventilés par catégorie,
    avec une série temporelle triée chronologiquement.

    Sans date de fin, la période est celle de `granularity` contenant `start`.
    Les écritures sont regroupées par `granularity` dans la série temporelle.
    """
    first, last = resolve_range(start, end, granularity)
    rows = db.execute(
        select(FinanceRecord, FinanceCategory)
        .join(FinanceCategory, FinanceCategory.id == FinanceRecord.category_id)
        .where(FinanceRecord.date >= first.date(), FinanceRecord.date <= last.date())
    ).all()

    totals = {"income": 0.0, "expense": 0.0}
    by_category = {"income": defaultdict(float), "expense": defaultdict(float)}
    series = defaultdict(lambda: {"income": 0.0, "expense": 0.0})

    for record, category in rows:
        amount = float(record.amount or 0)
        totals[category.type] += amount
        by_category[category.type][category.name] += amount
        series[period_key(record.date, granularity)][category.type] += amount

    time_series = [
        PeriodTotals(
            period=key,
            income=round(values["income"], 2),
            expense=round(values["expense"], 2),
            balance=round(values["income"] - values["expense"], 2),
        )
        for key, values in sorted(series.items())
    ]

    return FinancialSummary(
        total_income=round(totals["income"], 2),
        total_expense=round(totals["expense"], 2),
        net_balance=round(totals["income"] - totals["expense"], 2),
        income_by_category=dict(by_category["income"]),
        expense_by_category=dict(by_category["expense"]),
        time_series=time_series,
    )


# ============================================================
# Exports CSV
# ============================================================

def export_records_csv(db: Session, start: Optional[date] = None, end: Optional[date] = None) -> str:
    """
    Génère un CSV des écritures (toutes, ou celles de la période [start, end]).
    Retourne le contenu CSV sous forme de string (UTF-8 BOM pour Excel).
    """
    query = (
        select(FinanceRecord, FinanceCategory)
        .join(FinanceCategory, FinanceCategory.id == FinanceRecord.category_id)
    )
    if start is not None:
        first, last = resolve_range(start, end or start, "day")
        query = query.where(FinanceRecord.date >= first.date(), FinanceRecord.date <= last.date())
    rows = db.execute(query.order_by(FinanceRecord.date)).all()

    output = io.StringIO()
    writer = csv.writer(output, delimiter=";")
    writer.writerow([
        "date", "type", "category", "amount", "description",
        "payment_method", "reference_number", "related_entity_type", "related_entity_id",
    ])
    for record, category in rows:
        writer.writerow([
            record.date.isoformat(),
            category.type,
            category.name,
            f"{record.amount:.2f}",
            record.description,
            record.payment_method or "",
            record.reference_number or "",
            record.related_entity_type or "",
            record.related_entity_id or "",
        ])

    return "\ufeff" + output.getvalue()  # BOM pour compatibilité Excel


def export_employees_csv(db: Session) -> str:
    """CSV de la liste des employés (UTF-8 BOM)."""
    employees = db.execute(select(Employee).order_by(Employee.name)).scalars().all()

    output = io.StringIO()
    writer = csv.writer(output, delimiter=";")
    writer.writerow(["name", "position", "hire_date", "contact", "email", "base_salary", "is_active"])
    for e in employees:
        writer.writerow([
            e.name,
            e.position,
            e.hire_date.isoformat() if e.hire_date else "",
            e.contact or "",
            e.email or "",
            f"{e.base_salary:.2f}",
            "yes" if e.is_active else "no",
        ])

    return "\ufeff" + output.getvalue()
