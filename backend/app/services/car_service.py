"""
Service métier des véhicules, identifiés par leur UIN.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.car import Car
from app.models.client import Client
from app.models.insurance import Insurance
from app.models.maintenance import MaintenanceRequest
from app.schemas.car import CarCreate, CarResponse, CarUpdate
from app.schemas.detail import CarHistory
from app.services import log_service, maintenance_service

logger = logging.getLogger(__name__)


def create_car(db: Session, data: CarCreate) -> Car:
    """
    Crée un véhicule.

    Règles :
    - l'UIN doit être unique
    - le client doit exister, l'assurance aussi si elle est fournie
    - année courante par défaut
    """
    if db.get(Car, data.uin) is not None:
        raise ValueError(f"Un véhicule avec l'UIN {data.uin} existe déjà.")
    _check_references(db, data.client_id, data.insurance_id)

    values = data.model_dump()
    if values["year"] is None:
        values["year"] = date.today().year

    car = Car(**values)
    db.add(car)
    db.flush()
    log_service.record(db, "create", "cars", after=car, car_uin=car.uin, client_id=car.client_id)
    db.commit()
    db.refresh(car)
    logger.info("Véhicule créé : %s (client %s)", car.uin, car.client_id)
    return car


def get_cars(db: Session) -> list[Car]:
    return db.execute(select(Car).order_by(Car.uin)).scalars().all()


def get_car(db: Session, uin: str) -> Optional[Car]:
    return db.get(Car, uin)


def update_car(db: Session, uin: str, data: CarUpdate) -> Optional[Car]:
    """Met à jour un véhicule ; un client ou une assurance modifiés sont revérifiés."""
    car = db.get(Car, uin)
    if car is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    if "client_id" in changes and changes["client_id"] is None:
        raise ValueError("Un véhicule doit appartenir à un client.")
    if changes.get("client_id") is not None and changes["client_id"] != car.client_id:
        _check_references(db, changes["client_id"], None)
    if changes.get("insurance_id") is not None and changes["insurance_id"] != car.insurance_id:
        _check_references(db, None, changes["insurance_id"])

    before = log_service.snapshot(car)
    for field, value in changes.items():
        setattr(car, field, value)

    log_service.record(db, "update", "cars", before=before, after=car, car_uin=car.uin, client_id=car.client_id)
    db.commit()
    db.refresh(car)
    return car


def delete_car(db: Session, uin: str) -> bool:
    """
    Supprime un véhicule.
    Bloqué tant que des demandes de maintenance le référencent.
    """
    car = db.get(Car, uin)
    if car is None:
        return False

    request_id = db.execute(
        select(MaintenanceRequest.id).where(MaintenanceRequest.car_uin == uin).limit(1)
    ).scalar()
    if request_id:
        raise ValueError("Impossible de supprimer ce véhicule : des demandes de maintenance y sont associées.")

    log_service.record(db, "delete", "cars", before=car, car_uin=car.uin, client_id=car.client_id)
    db.delete(car)
    db.commit()
    logger.info("Véhicule supprimé : %s", uin)
    return True


def get_car_history(db: Session, uin: str) -> Optional[CarHistory]:
    """Véhicule, nom du propriétaire et historique de maintenance (du plus récent au plus ancien)."""
    car = db.get(Car, uin)
    if car is None:
        return None

    client = db.get(Client, car.client_id)
    requests = db.execute(
        select(MaintenanceRequest)
        .where(MaintenanceRequest.car_uin == uin)
        .order_by(MaintenanceRequest.start_date.desc())
    ).scalars().all()

    return CarHistory(
        car=CarResponse.model_validate(car),
        client_name=client.name if client else maintenance_service.UNKNOWN_CLIENT,
        maintenance=[maintenance_service.to_detail(db, r) for r in requests],
    )


def _check_references(db: Session, client_id, insurance_id) -> None:
    if client_id is not None and db.get(Client, client_id) is None:
        raise ValueError("Client introuvable.")
    if insurance_id is not None and db.get(Insurance, insurance_id) is None:
        raise ValueError("Assurance introuvable.")
