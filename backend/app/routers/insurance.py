"""
Router pour les compagnies d'assurance.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.insurance import InsuranceCreate, InsuranceResponse, InsuranceUpdate
from app.services import insurance_service

router = APIRouter(prefix="/api/v1/insurance", tags=["Assurances"])


@router.post("", response_model=InsuranceResponse, status_code=201, summary="Créer une assurance")
def create_insurance(data: InsuranceCreate, db: Session = Depends(get_db)):
    return insurance_service.create_insurance(db, data)


@router.get("", response_model=List[InsuranceResponse], summary="Lister les assurances")
def list_insurances(db: Session = Depends(get_db)):
    return insurance_service.get_insurances(db)


@router.get("/{insurance_id}", response_model=InsuranceResponse, summary="Détail d'une assurance")
def get_insurance(insurance_id: uuid.UUID, db: Session = Depends(get_db)):
    insurance = insurance_service.get_insurance(db, insurance_id)
    if insurance is None:
        raise HTTPException(status_code=404, detail="Assurance introuvable.")
    return insurance


@router.put("/{insurance_id}", response_model=InsuranceResponse, summary="Modifier une assurance")
def update_insurance(insurance_id: uuid.UUID, data: InsuranceUpdate, db: Session = Depends(get_db)):
    insurance = insurance_service.update_insurance(db, insurance_id, data)
    if insurance is None:
        raise HTTPException(status_code=404, detail="Assurance introuvable.")
    return insurance


@router.delete("/{insurance_id}", status_code=204, summary="Supprimer une assurance")
def delete_insurance(insurance_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        success = insurance_service.delete_insurance(db, insurance_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not success:
        raise HTTPException(status_code=404, detail="Assurance introuvable.")
