"""
Router pour la consultation du journal d'audit.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.log_entry import LogEntryResponse, LogFilter
from app.services import log_service

router = APIRouter(prefix="/api/v1/logs", tags=["Journal"])


@router.get("", response_model=List[LogEntryResponse], summary="Historique complet")
def list_logs(db: Session = Depends(get_db)):
    """Toutes les entrées, de la plus récente à la plus ancienne."""
    return log_service.get_logs(db)


@router.post("/filter", response_model=List[LogEntryResponse], summary="Historique filtré")
def filter_logs(filters: LogFilter, db: Session = Depends(get_db)):
    """Égalité stricte sur chaque champ fourni (table, action, client, véhicule...)."""
    return log_service.get_filtered(db, filters)


@router.get("/range", response_model=List[LogEntryResponse], summary="Historique d'une période")
def logs_by_date_range(
    start: date,
    end: Optional[date] = None,
    granularity: str = Query("day"),
    db: Session = Depends(get_db),
):
    """Sans date de fin : jour, semaine (dimanche), mois ou année contenant `start`."""
    try:
        return log_service.get_by_date_range(db, start, end, granularity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
