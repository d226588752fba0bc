"""
Service métier des employés et de leurs salaires.

Un salaire payé (créé payé, ou passé à payé) génère une dépense
« Employee Salaries » par virement bancaire ; supprimer un salaire payé
supprime les écritures qui lui sont liées.
"""

import uuid
import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.employee import Employee, Salary
from app.schemas.employee import EmployeeCreate, EmployeeUpdate, SalaryCreate, SalaryUpdate
from app.services import finance_service, log_service
from app.services.date_ranges import resolve_range

logger = logging.getLogger(__name__)


# ============================================================
# Employés
# ============================================================

def create_employee(db: Session, data: EmployeeCreate) -> Employee:
    employee = Employee(**data.model_dump())
    db.add(employee)
    db.flush()
    log_service.record(db, "create", "employees", after=employee)
    db.commit()
    db.refresh(employee)
    logger.info("Employé créé : %s (%s)", employee.name, employee.position)
    return employee


def get_employees(db: Session, active_only: bool = False) -> list[Employee]:
    query = select(Employee).order_by(Employee.name)
    if active_only:
        query = query.where(Employee.is_active.is_(True))
    return db.execute(query).scalars().all()


def get_employee(db: Session, employee_id: uuid.UUID) -> Optional[Employee]:
    return db.get(Employee, employee_id)


def update_employee(db: Session, employee_id: uuid.UUID, data: EmployeeUpdate) -> Optional[Employee]:
    employee = db.get(Employee, employee_id)
    if employee is None:
        return None

    before = log_service.snapshot(employee)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(employee, field, value)

    log_service.record(db, "update", "employees", before=before, after=employee)
    db.commit()
    db.refresh(employee)
    return employee


def delete_employee(db: Session, employee_id: uuid.UUID) -> bool:
    """Supprime un employé. Bloqué tant que des salaires lui sont rattachés."""
    employee = db.get(Employee, employee_id)
    if employee is None:
        return False

    salary_id = db.execute(select(Salary.id).where(Salary.employee_id == employee_id).limit(1)).scalar()
    if salary_id:
        raise ValueError(
            "Impossible de supprimer cet employé : des salaires lui sont rattachés. "
            "Désactivez-le plutôt."
        )

    log_service.record(db, "delete", "employees", before=employee)
    db.delete(employee)
    db.commit()
    return True


# ============================================================
# Salaires
# ============================================================

def create_salary(db: Session, data: SalaryCreate) -> Salary:
    """Crée un salaire pour un employé existant ; payé → dépense immédiate."""
    employee = db.get(Employee, data.employee_id)
    if employee is None:
        raise ValueError("Employé introuvable.")

    salary = Salary(**data.model_dump())
    db.add(salary)
    db.flush()

    if salary.is_paid:
        _book_salary(db, salary, employee)

    log_service.record(db, "create", "salaries", after=salary)
    db.commit()
    db.refresh(salary)
    return salary


def get_salaries(db: Session, employee_id: Optional[uuid.UUID] = None) -> list[Salary]:
    query = select(Salary).order_by(Salary.payment_date.desc())
    if employee_id is not None:
        query = query.where(Salary.employee_id == employee_id)
    return db.execute(query).scalars().all()


def get_salaries_by_date_range(
    db: Session, start: date, end: Optional[date] = None, granularity: str = "month"
) -> list[Salary]:
    """Salaires dont la date de paiement tombe dans la période."""
    first, last = resolve_range(start, end, granularity)
    return db.execute(
        select(Salary)
        .where(Salary.payment_date >= first.date(), Salary.payment_date <= last.date())
        .order_by(Salary.payment_date.desc())
    ).scalars().all()


def get_salary(db: Session, salary_id: uuid.UUID) -> Optional[Salary]:
    return db.get(Salary, salary_id)


def update_salary(db: Session, salary_id: uuid.UUID, data: SalaryUpdate) -> Optional[Salary]:
    """Met à jour un salaire ; le passage de non payé à payé génère la dépense."""
    salary = db.get(Salary, salary_id)
    if salary is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    if changes.get("employee_id") is not None and db.get(Employee, changes["employee_id"]) is None:
        raise ValueError("Employé introuvable.")

    was_paid = bool(salary.is_paid)
    before = log_service.snapshot(salary)
    for field, value in changes.items():
        if value is None and field != "notes":
            continue
        setattr(salary, field, value)

    if salary.is_paid and not was_paid:
        _book_salary(db, salary, db.get(Employee, salary.employee_id))

    log_service.record(db, "update", "salaries", before=before, after=salary)
    db.commit()
    db.refresh(salary)
    return salary


def delete_salary(db: Session, salary_id: uuid.UUID) -> bool:
    """Supprime un salaire (et ses écritures financières s'il était payé)."""
    salary = db.get(Salary, salary_id)
    if salary is None:
        return False

    if salary.is_paid:
        removed = finance_service.delete_records_for(db, "salary", salary.id)
        logger.info("Salaire %s : %d écriture(s) financière(s) supprimée(s)", salary.id, removed)

    log_service.record(db, "delete", "salaries", before=salary)
    db.delete(salary)
    db.commit()
    return True


def _book_salary(db: Session, salary: Salary, employee: Optional[Employee]) -> None:
    name = employee.name if employee else "Employé inconnu"
    finance_service.book_record(
        db,
        finance_service.EMPLOYEE_SALARIES,
        amount=salary.amount,
        description=f"Salaire {name} - {salary.payment_period}",
        related_entity_type="salary",
        related_entity_id=salary.id,
        payment_method="bank_transfer",
        notes=salary.notes,
        on_date=salary.payment_date,
    )
