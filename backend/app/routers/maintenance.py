"""
Router pour les demandes de maintenance et leurs paiements.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.maintenance import (
    MaintenanceCreate,
    MaintenanceDetail,
    MaintenanceResponse,
    MaintenanceUpdate,
    PaymentCreate,
)
from app.services import maintenance_service

router = APIRouter(prefix="/api/v1/maintenance", tags=["Maintenance"])


@router.post("", response_model=MaintenanceResponse, status_code=201, summary="Créer une demande de maintenance")
def create_maintenance(data: MaintenanceCreate, db: Session = Depends(get_db)):
    """
    Crée une demande : vérifie le véhicule, le client, les prestations et les produits,
    débite le stock et calcule le coût total et le solde.
    """
    try:
        return maintenance_service.create_maintenance(db, data)
    except ValueError as e:
        msg = str(e)
        if "introuvable" in msg:
            raise HTTPException(status_code=404, detail=msg)
        raise HTTPException(status_code=400, detail=msg)


@router.get("", response_model=List[MaintenanceResponse], summary="Lister les demandes")
def list_maintenance(db: Session = Depends(get_db)):
    return maintenance_service.get_all(db)


@router.get("/enriched", response_model=List[MaintenanceDetail], summary="Lister les demandes (enrichies)")
def list_maintenance_enriched(db: Session = Depends(get_db)):
    """Demandes avec nom du client, véhicule, et nom et coût de chaque ligne."""
    return maintenance_service.get_enriched(db)


@router.get("/{maintenance_id}", response_model=MaintenanceDetail, summary="Détail d'une demande")
def get_maintenance(maintenance_id: uuid.UUID, db: Session = Depends(get_db)):
    detail = maintenance_service.get_maintenance_detail(db, maintenance_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Demande de maintenance introuvable.")
    return detail


@router.put("/{maintenance_id}", response_model=MaintenanceResponse, summary="Modifier une demande")
def update_maintenance(maintenance_id: uuid.UUID, data: MaintenanceUpdate, db: Session = Depends(get_db)):
    """
    Remplacer les produits remet d'abord les anciennes quantités en stock.
    Le total et le statut de paiement sont recalculés.
    """
    try:
        result = maintenance_service.update_maintenance(db, maintenance_id, data)
    except ValueError as e:
        msg = str(e)
        if "introuvable" in msg:
            raise HTTPException(status_code=404, detail=msg)
        raise HTTPException(status_code=400, detail=msg)
    if result is None:
        raise HTTPException(status_code=404, detail="Demande de maintenance introuvable.")
    return result


@router.delete("/{maintenance_id}", status_code=204, summary="Supprimer une demande")
def delete_maintenance(maintenance_id: uuid.UUID, db: Session = Depends(get_db)):
    """Supprime la demande et remet en stock les produits consommés."""
    success = maintenance_service.delete_maintenance(db, maintenance_id)
    if not success:
        raise HTTPException(status_code=404, detail="Demande de maintenance introuvable.")


@router.post("/{maintenance_id}/payments", response_model=MaintenanceResponse, summary="Enregistrer un paiement")
def make_payment(maintenance_id: uuid.UUID, data: PaymentCreate, db: Session = Depends(get_db)):
    """Ajoute un paiement, met à jour le solde et crée une recette « Maintenance Payments »."""
    try:
        result = maintenance_service.make_payment(db, maintenance_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail="Demande de maintenance introuvable.")
    return result
