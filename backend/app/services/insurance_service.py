"""
Service métier des compagnies d'assurance.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.car import Car
from app.models.insurance import Insurance
from app.schemas.insurance import InsuranceCreate, InsuranceUpdate
from app.services import log_service


def create_insurance(db: Session, data: InsuranceCreate) -> Insurance:
    insurance = Insurance(**data.model_dump())
    db.add(insurance)
    db.flush()
    log_service.record(db, "create", "insurance", after=insurance, insurance_id=insurance.id)
    db.commit()
    db.refresh(insurance)
    return insurance


def get_insurances(db: Session) -> list[Insurance]:
    return db.execute(select(Insurance).order_by(Insurance.name)).scalars().all()


def get_insurance(db: Session, insurance_id: uuid.UUID) -> Optional[Insurance]:
    return db.get(Insurance, insurance_id)


def update_insurance(db: Session, insurance_id: uuid.UUID, data: InsuranceUpdate) -> Optional[Insurance]:
    insurance = db.get(Insurance, insurance_id)
    if insurance is None:
        return None

    before = log_service.snapshot(insurance)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(insurance, field, value)

    log_service.record(db, "update", "insurance", before=before, after=insurance, insurance_id=insurance.id)
    db.commit()
    db.refresh(insurance)
    return insurance


def delete_insurance(db: Session, insurance_id: uuid.UUID) -> bool:
    """Supprime une assurance. Bloqué tant qu'un véhicule y est rattaché."""
    insurance = db.get(Insurance, insurance_id)
    if insurance is None:
        return False

    car_uin = db.execute(select(Car.uin).where(Car.insurance_id == insurance_id).limit(1)).scalar()
    if car_uin:
        raise ValueError("Impossible de supprimer cette assurance : des véhicules y sont rattachés.")

    log_service.record(db, "delete", "insurance", before=insurance, insurance_id=insurance.id)
    db.delete(insurance)
    db.commit()
    return True
