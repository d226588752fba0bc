"""
Router pour les employés et les salaires.
"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.employee import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    SalaryCreate,
    SalaryResponse,
    SalaryUpdate,
)
from app.services import employee_service, finance_service

router = APIRouter(prefix="/api/v1", tags=["Employés"])


# --- Employés ---

@router.post("/employees", response_model=EmployeeResponse, status_code=201, summary="Créer un employé")
def create_employee(data: EmployeeCreate, db: Session = Depends(get_db)):
    return employee_service.create_employee(db, data)


@router.get("/employees", response_model=List[EmployeeResponse], summary="Lister les employés")
def list_employees(active_only: bool = False, db: Session = Depends(get_db)):
    return employee_service.get_employees(db, active_only)


@router.get("/employees/export", summary="Exporter les employés en CSV")
def export_employees(db: Session = Depends(get_db)):
    """CSV UTF-8 BOM, séparateur ; (compatible Excel)."""
    csv_content = finance_service.export_employees_csv(db)
    return StreamingResponse(
        iter([csv_content]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=employees.csv"},
    )


@router.get("/employees/{employee_id}", response_model=EmployeeResponse, summary="Détail d'un employé")
def get_employee(employee_id: uuid.UUID, db: Session = Depends(get_db)):
    employee = employee_service.get_employee(db, employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="Employé introuvable.")
    return employee


@router.put("/employees/{employee_id}", response_model=EmployeeResponse, summary="Modifier un employé")
def update_employee(employee_id: uuid.UUID, data: EmployeeUpdate, db: Session = Depends(get_db)):
    employee = employee_service.update_employee(db, employee_id, data)
    if employee is None:
        raise HTTPException(status_code=404, detail="Employé introuvable.")
    return employee


@router.delete("/employees/{employee_id}", status_code=204, summary="Supprimer un employé")
def delete_employee(employee_id: uuid.UUID, db: Session = Depends(get_db)):
    """Bloqué tant que des salaires sont rattachés à l'employé."""
    try:
        success = employee_service.delete_employee(db, employee_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not success:
        raise HTTPException(status_code=404, detail="Employé introuvable.")


# --- Salaires ---

@router.post("/salaries", response_model=SalaryResponse, status_code=201, summary="Créer un salaire")
def create_salary(data: SalaryCreate, db: Session = Depends(get_db)):
    """Un salaire créé comme payé génère immédiatement une dépense « Employee Salaries »."""
    try:
        return employee_service.create_salary(db, data)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/salaries", response_model=List[SalaryResponse], summary="Lister les salaires")
def list_salaries(employee_id: Optional[uuid.UUID] = None, db: Session = Depends(get_db)):
    return employee_service.get_salaries(db, employee_id)


@router.get("/salaries/range", response_model=List[SalaryResponse], summary="Salaires d'une période")
def salaries_by_date_range(
    start: date,
    end: Optional[date] = None,
    granularity: str = Query("month"),
    db: Session = Depends(get_db),
):
    try:
        return employee_service.get_salaries_by_date_range(db, start, end, granularity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/salaries/{salary_id}", response_model=SalaryResponse, summary="Détail d'un salaire")
def get_salary(salary_id: uuid.UUID, db: Session = Depends(get_db)):
    salary = employee_service.get_salary(db, salary_id)
    if salary is None:
        raise HTTPException(status_code=404, detail="Salaire introuvable.")
    return salary


@router.put("/salaries/{salary_id}", response_model=SalaryResponse, summary="Modifier un salaire")
def update_salary(salary_id: uuid.UUID, data: SalaryUpdate, db: Session = Depends(get_db)):
    try:
        salary = employee_service.update_salary(db, salary_id, data)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if salary is None:
        raise HTTPException(status_code=404, detail="Salaire introuvable.")
    return salary


@router.delete("/salaries/{salary_id}", status_code=204, summary="Supprimer un salaire")
def delete_salary(salary_id: uuid.UUID, db: Session = Depends(get_db)):
    """Supprime aussi les écritures financières d'un salaire payé."""
    success = employee_service.delete_salary(db, salary_id)
    if not success:
        raise HTTPException(status_code=404, detail="Salaire introuvable.")
