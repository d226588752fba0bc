"""
Router pour les rapports : tableau de bord, rapport journalier, plages de dates.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.car import CarReportRow
from app.schemas.maintenance import MaintenanceDetail
from app.schemas.report import DailyReport, SystemAnalytics
from app.services import report_service

router = APIRouter(prefix="/api/v1/reports", tags=["Rapports"])


@router.get("/analytics", response_model=SystemAnalytics, summary="Tableau de bord analytique")
def system_analytics(period: str = Query("month"), db: Session = Depends(get_db)):
    """Indicateurs sur la dernière semaine, le dernier mois ou la dernière année."""
    try:
        return report_service.system_analytics(db, period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/daily/{day}", response_model=DailyReport, summary="Rapport journalier")
def daily_report(day: str, db: Session = Depends(get_db)):
    """Activité d'une journée YYYY-MM-DD dans le fuseau du garage."""
    try:
        return report_service.daily_report(db, day)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/cars", response_model=List[CarReportRow], summary="Véhicules enregistrés sur une période")
def cars_by_date_range(start: str, end: str, db: Session = Depends(get_db)):
    try:
        return report_service.cars_by_date_range(db, start, end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/maintenance", response_model=List[MaintenanceDetail], summary="Maintenances créées sur une période")
def maintenance_by_date_range(start: str, end: str, db: Session = Depends(get_db)):
    try:
        return report_service.maintenance_by_date_range(db, start, end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
