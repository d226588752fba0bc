"""
Service métier du catalogue des prestations d'atelier (main d'œuvre).
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.maintenance import MaintenanceService
from app.models.service import Service
from app.schemas.service import ServiceCreate, ServiceUpdate
from app.services import log_service


def create_service(db: Session, data: ServiceCreate) -> Service:
    service = Service(**data.model_dump())
    db.add(service)
    db.flush()
    log_service.record(db, "create", "services", after=service, service_id=service.id)
    db.commit()
    db.refresh(service)
    return service


def get_services(db: Session) -> list[Service]:
    return db.execute(select(Service).order_by(Service.name)).scalars().all()


def get_service(db: Session, service_id: uuid.UUID) -> Optional[Service]:
    return db.get(Service, service_id)


def update_service(db: Session, service_id: uuid.UUID, data: ServiceUpdate) -> Optional[Service]:
    service = db.get(Service, service_id)
    if service is None:
        return None

    before = log_service.snapshot(service)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(service, field, value)

    log_service.record(db, "update", "services", before=before, after=service, service_id=service.id)
    db.commit()
    db.refresh(service)
    return service


def delete_service(db: Session, service_id: uuid.UUID) -> bool:
    """Supprime une prestation. Bloqué tant qu'une demande de maintenance l'utilise."""
    service = db.get(Service, service_id)
    if service is None:
        return False

    used = db.execute(
        select(MaintenanceService.id).where(MaintenanceService.service_id == service_id).limit(1)
    ).scalar()
    if used:
        raise ValueError("Impossible de supprimer cette prestation : elle est utilisée dans des demandes de maintenance.")

    log_service.record(db, "delete", "services", before=service, service_id=service.id)
    db.delete(service)
    db.commit()
    return True
