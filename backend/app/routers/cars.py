"""
Router pour les véhicules (identifiés par leur UIN).
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.car import CarCreate, CarResponse, CarUpdate
from app.schemas.detail import CarHistory
from app.services import car_service

router = APIRouter(prefix="/api/v1/cars", tags=["Véhicules"])


@router.post("", response_model=CarResponse, status_code=201, summary="Enregistrer un véhicule")
def create_car(data: CarCreate, db: Session = Depends(get_db)):
    """
    Enregistre un véhicule pour un client existant.
    L'UIN doit être unique ; insurance_id="none" signifie sans assurance.
    """
    try:
        return car_service.create_car(db, data)
    except ValueError as e:
        msg = str(e)
        if "introuvable" in msg:
            raise HTTPException(status_code=404, detail=msg)
        raise HTTPException(status_code=409, detail=msg)


@router.get("", response_model=List[CarResponse], summary="Lister les véhicules")
def list_cars(db: Session = Depends(get_db)):
    return car_service.get_cars(db)


@router.get("/{uin}", response_model=CarResponse, summary="Détail d'un véhicule")
def get_car(uin: str, db: Session = Depends(get_db)):
    car = car_service.get_car(db, uin)
    if car is None:
        raise HTTPException(status_code=404, detail="Véhicule introuvable.")
    return car


@router.get("/{uin}/history", response_model=CarHistory, summary="Historique de maintenance d'un véhicule")
def get_car_history(uin: str, db: Session = Depends(get_db)):
    history = car_service.get_car_history(db, uin)
    if history is None:
        raise HTTPException(status_code=404, detail="Véhicule introuvable.")
    return history


@router.put("/{uin}", response_model=CarResponse, summary="Modifier un véhicule")
def update_car(uin: str, data: CarUpdate, db: Session = Depends(get_db)):
    try:
        car = car_service.update_car(db, uin, data)
    except ValueError as e:
        msg = str(e)
        if "introuvable" in msg:
            raise HTTPException(status_code=404, detail=msg)
        raise HTTPException(status_code=400, detail=msg)
    if car is None:
        raise HTTPException(status_code=404, detail="Véhicule introuvable.")
    return car


@router.delete("/{uin}", status_code=204, summary="Supprimer un véhicule")
def delete_car(uin: str, db: Session = Depends(get_db)):
    """Bloqué tant que des demandes de maintenance référencent le véhicule."""
    try:
        success = car_service.delete_car(db, uin)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not success:
        raise HTTPException(status_code=404, detail="Véhicule introuvable.")
