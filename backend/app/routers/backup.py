"""
Router pour la sauvegarde, la restauration et les données de démonstration.
"""

import json

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.backup import BackupFile, BackupImport, ImportResult, SeedResult
from app.services import backup_service, seed_service

router = APIRouter(prefix="/api/v1", tags=["Sauvegarde"])

MAX_FILE_SIZE_MB = 50


@router.get("/backup", response_model=BackupFile, summary="Exporter la base")
def export_backup(db: Session = Depends(get_db)):
    """Instantané complet (version 1.0) : clients, véhicules, catalogue, stock, maintenance, journal."""
    return backup_service.export_backup(db)


@router.post("/backup", response_model=ImportResult, summary="Restaurer une sauvegarde (JSON)")
def import_backup(backup: BackupImport, db: Session = Depends(get_db)):
    """
    Chaque collection non vide remplace la collection existante.
    Les entrées de journal sont ajoutées, les identifiants déjà connus sont ignorés.
    """
    try:
        return backup_service.import_backup(db, backup)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/backup/upload", response_model=ImportResult, summary="Restaurer une sauvegarde (fichier)")
async def upload_backup(file: UploadFile = File(...), db: Session = Depends(get_db)):
    content = await file.read()

    if len(content) > MAX_FILE_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"Fichier trop volumineux. Taille maximale : {MAX_FILE_SIZE_MB} Mo.",
        )
    if not content:
        raise HTTPException(status_code=400, detail="Le fichier de sauvegarde est vide.")

    try:
        backup = BackupImport.model_validate(json.loads(content.decode("utf-8-sig")))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise HTTPException(status_code=400, detail="Le fichier n'est pas un JSON valide.")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    try:
        return backup_service.import_backup(db, backup)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/seed", response_model=SeedResult, summary="Insérer les données de démonstration")
def seed_database(db: Session = Depends(get_db)):
    """Sans effet si la base contient déjà au moins un client."""
    return seed_service.seed_database(db)
