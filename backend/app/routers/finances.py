"""
Router pour les finances : catégories, écritures, synthèse et export CSV.
"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.finance import (
    FinanceCategoryCreate,
    FinanceCategoryResponse,
    FinanceCategoryUpdate,
    FinanceRecordCreate,
    FinanceRecordResponse,
    FinanceRecordUpdate,
    FinancialSummary,
)
from app.services import finance_service

router = APIRouter(prefix="/api/v1/finances", tags=["Finances"])


# --- Catégories ---

@router.post("/categories", response_model=FinanceCategoryResponse, status_code=201, summary="Créer une catégorie")
def create_category(data: FinanceCategoryCreate, db: Session = Depends(get_db)):
    try:
        return finance_service.create_category(db, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/categories", response_model=List[FinanceCategoryResponse], summary="Lister les catégories")
def list_categories(type: Optional[str] = None, db: Session = Depends(get_db)):
    return finance_service.get_categories(db, type)


@router.put("/categories/{category_id}", response_model=FinanceCategoryResponse, summary="Modifier une catégorie")
def update_category(category_id: uuid.UUID, data: FinanceCategoryUpdate, db: Session = Depends(get_db)):
    try:
        category = finance_service.update_category(db, category_id, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if category is None:
        raise HTTPException(status_code=404, detail="Catégorie financière introuvable.")
    return category


@router.delete("/categories/{category_id}", status_code=204, summary="Supprimer une catégorie")
def delete_category(category_id: uuid.UUID, db: Session = Depends(get_db)):
    """Bloqué tant que des écritures utilisent la catégorie."""
    try:
        success = finance_service.delete_category(db, category_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not success:
        raise HTTPException(status_code=404, detail="Catégorie financière introuvable.")


# --- Écritures ---

@router.post("/records", response_model=FinanceRecordResponse, status_code=201, summary="Créer une écriture")
def create_record(data: FinanceRecordCreate, db: Session = Depends(get_db)):
    try:
        return finance_service.create_record(db, data)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/records", response_model=List[FinanceRecordResponse], summary="Lister les écritures")
def list_records(
    category_id: Optional[uuid.UUID] = None,
    type: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    granularity: str = Query("day"),
    db: Session = Depends(get_db),
):
    """Filtres optionnels : catégorie, type (income / expense), période."""
    try:
        return finance_service.get_records(db, category_id, type, start, end, granularity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/records/export", summary="Exporter les écritures en CSV")
def export_records(start: Optional[date] = None, end: Optional[date] = None, db: Session = Depends(get_db)):
    """Toutes les écritures, ou celles de [start, end] (CSV UTF-8 BOM, séparateur ;)."""
    try:
        csv_content = finance_service.export_records_csv(db, start, end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    suffix = f"_{start}_{end or start}" if start else ""
    return StreamingResponse(
        iter([csv_content]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename=finances{suffix}.csv"},
    )


@router.get("/records/{record_id}", response_model=FinanceRecordResponse, summary="Détail d'une écriture")
def get_record(record_id: uuid.UUID, db: Session = Depends(get_db)):
    record = finance_service.get_record(db, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Écriture introuvable.")
    return record


@router.put("/records/{record_id}", response_model=FinanceRecordResponse, summary="Modifier une écriture")
def update_record(record_id: uuid.UUID, data: FinanceRecordUpdate, db: Session = Depends(get_db)):
    try:
        record = finance_service.update_record(db, record_id, data)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if record is None:
        raise HTTPException(status_code=404, detail="Écriture introuvable.")
    return record


@router.delete("/records/{record_id}", status_code=204, summary="Supprimer une écriture")
def delete_record(record_id: uuid.UUID, db: Session = Depends(get_db)):
    success = finance_service.delete_record(db, record_id)
    if not success:
        raise HTTPException(status_code=404, detail="Écriture introuvable.")


# --- Synthèse ---

@router.get("/summary", response_model=FinancialSummary, summary="Synthèse financière")
def financial_summary(
    start: date,
    end: Optional[date] = None,
    granularity: str = Query("month"),
    db: Session = Depends(get_db),
):
    """
    Totaux recettes / dépenses, solde net, ventilation par catégorie
    et série temporelle regroupée par `granularity`.
    """
    try:
        return finance_service.financial_summary(db, start, end, granularity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
