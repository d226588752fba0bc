"""
Router pour le catalogue des prestations d'atelier.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.service import ServiceCreate, ServiceResponse, ServiceUpdate
from app.services import catalog_service

router = APIRouter(prefix="/api/v1/services", tags=["Prestations"])


@router.post("", response_model=ServiceResponse, status_code=201, summary="Créer une prestation")
def create_service(data: ServiceCreate, db: Session = Depends(get_db)):
    return catalog_service.create_service(db, data)


@router.get("", response_model=List[ServiceResponse], summary="Lister les prestations")
def list_services(db: Session = Depends(get_db)):
    return catalog_service.get_services(db)


@router.get("/{service_id}", response_model=ServiceResponse, summary="Détail d'une prestation")
def get_service(service_id: uuid.UUID, db: Session = Depends(get_db)):
    service = catalog_service.get_service(db, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Prestation introuvable.")
    return service


@router.put("/{service_id}", response_model=ServiceResponse, summary="Modifier une prestation")
def update_service(service_id: uuid.UUID, data: ServiceUpdate, db: Session = Depends(get_db)):
    service = catalog_service.update_service(db, service_id, data)
    if service is None:
        raise HTTPException(status_code=404, detail="Prestation introuvable.")
    return service


@router.delete("/{service_id}", status_code=204, summary="Supprimer une prestation")
def delete_service(service_id: uuid.UUID, db: Session = Depends(get_db)):
    """Bloqué tant qu'une demande de maintenance utilise la prestation."""
    try:
        success = catalog_service.delete_service(db, service_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not success:
        raise HTTPException(status_code=404, detail="Prestation introuvable.")
