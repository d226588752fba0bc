"""
Service métier des clients.
CRUD avec journalisation, et fiches détaillées (véhicules, demandes de maintenance).
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.car import Car
from app.models.client import Client
from app.models.maintenance import MaintenanceRequest
from app.schemas.car import CarResponse
from app.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from app.schemas.detail import ClientWithCars, ClientWithRequests
from app.services import log_service, maintenance_service

logger = logging.getLogger(__name__)


def create_client(db: Session, data: ClientCreate) -> Client:
    client = Client(**data.model_dump())
    db.add(client)
    db.flush()
    log_service.record(db, "create", "clients", after=client, client_id=client.id)
    db.commit()
    db.refresh(client)
    logger.info("Client créé : %s (%s)", client.name, client.id)
    return client


def get_clients(db: Session) -> list[Client]:
    """Retourne tous les clients triés par nom."""
    return db.execute(select(Client).order_by(Client.name)).scalars().all()


def get_client(db: Session, client_id: uuid.UUID) -> Optional[Client]:
    return db.get(Client, client_id)


def update_client(db: Session, client_id: uuid.UUID, data: ClientUpdate) -> Optional[Client]:
    """Met à jour les champs fournis. Retourne None si le client n'existe pas."""
    client = db.get(Client, client_id)
    if client is None:
        return None

    before = log_service.snapshot(client)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(client, field, value)

    log_service.record(db, "update", "clients", before=before, after=client, client_id=client.id)
    db.commit()
    db.refresh(client)
    return client


def delete_client(db: Session, client_id: uuid.UUID) -> bool:
    """
    Supprime un client.
    Bloqué tant qu'il possède au moins un véhicule.
    """
    client = db.get(Client, client_id)
    if client is None:
        return False

    car_uin = db.execute(select(Car.uin).where(Car.client_id == client_id).limit(1)).scalar()
    if car_uin:
        raise ValueError(
            "Impossible de supprimer ce client : des véhicules lui sont associés. "
            "Supprimez ou réattribuez d'abord ses véhicules."
        )

    log_service.record(db, "delete", "clients", before=client, client_id=client.id)
    db.delete(client)
    db.commit()
    logger.info("Client supprimé : %s", client_id)
    return True


def get_client_with_cars(db: Session, client_id: uuid.UUID) -> Optional[ClientWithCars]:
    client = db.get(Client, client_id)
    if client is None:
        return None
    return ClientWithCars(
        client=ClientResponse.model_validate(client),
        cars=[CarResponse.model_validate(c) for c in _cars_of(db, client_id)],
    )


def get_client_with_requests(db: Session, client_id: uuid.UUID) -> Optional[ClientWithRequests]:
    """Fiche client complète : véhicules et demandes de maintenance enrichies."""
    client = db.get(Client, client_id)
    if client is None:
        return None

    requests = db.execute(
        select(MaintenanceRequest)
        .where(MaintenanceRequest.client_id == client_id)
        .order_by(MaintenanceRequest.start_date.desc())
    ).scalars().all()

    return ClientWithRequests(
        client=ClientResponse.model_validate(client),
        cars=[CarResponse.model_validate(c) for c in _cars_of(db, client_id)],
        maintenance=[maintenance_service.to_detail(db, r) for r in requests],
    )


def _cars_of(db: Session, client_id: uuid.UUID) -> list[Car]:
    return db.execute(select(Car).where(Car.client_id == client_id).order_by(Car.uin)).scalars().all()
