"""
Router pour les clients : CRUD et fiches détaillées.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from app.schemas.detail import ClientWithCars, ClientWithRequests
from app.services import client_service

router = APIRouter(prefix="/api/v1/clients", tags=["Clients"])


@router.post("", response_model=ClientResponse, status_code=201, summary="Créer un client")
def create_client(data: ClientCreate, db: Session = Depends(get_db)):
    return client_service.create_client(db, data)


@router.get("", response_model=List[ClientResponse], summary="Lister les clients")
def list_clients(db: Session = Depends(get_db)):
    """Retourne tous les clients triés par nom."""
    return client_service.get_clients(db)


@router.get("/{client_id}", response_model=ClientResponse, summary="Détail d'un client")
def get_client(client_id: uuid.UUID, db: Session = Depends(get_db)):
    client = client_service.get_client(db, client_id)
    if client is None:
        raise HTTPException(status_code=404, detail="Client introuvable.")
    return client


@router.get("/{client_id}/cars", response_model=ClientWithCars, summary="Client et ses véhicules")
def get_client_with_cars(client_id: uuid.UUID, db: Session = Depends(get_db)):
    result = client_service.get_client_with_cars(db, client_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Client introuvable.")
    return result


@router.get("/{client_id}/maintenance", response_model=ClientWithRequests, summary="Client et ses maintenances")
def get_client_with_requests(client_id: uuid.UUID, db: Session = Depends(get_db)):
    """Fiche complète : véhicules du client et demandes de maintenance enrichies."""
    result = client_service.get_client_with_requests(db, client_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Client introuvable.")
    return result


@router.put("/{client_id}", response_model=ClientResponse, summary="Modifier un client")
def update_client(client_id: uuid.UUID, data: ClientUpdate, db: Session = Depends(get_db)):
    client = client_service.update_client(db, client_id, data)
    if client is None:
        raise HTTPException(status_code=404, detail="Client introuvable.")
    return client


@router.delete("/{client_id}", status_code=204, summary="Supprimer un client")
def delete_client(client_id: uuid.UUID, db: Session = Depends(get_db)):
    """Bloqué tant que le client possède des véhicules."""
    try:
        success = client_service.delete_client(db, client_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not success:
        raise HTTPException(status_code=404, detail="Client introuvable.")
