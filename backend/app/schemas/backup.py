"""
Schémas Pydantic pour la sauvegarde et la restauration de la base.
"""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, field_validator

BACKUP_VERSION = "1.0"

# Collections obligatoires dans un fichier de sauvegarde importé
REQUIRED_COLLECTIONS = ("clients", "cars", "services", "products", "maintenance")


class BackupData(BaseModel):
    clients: List[Dict[str, Any]]
    cars: List[Dict[str, Any]]
    services: List[Dict[str, Any]]
    products: List[Dict[str, Any]]
    maintenance: List[Dict[str, Any]]
    insurance: List[Dict[str, Any]] = []
    suppliers: List[Dict[str, Any]] = []
    logs: List[Dict[str, Any]] = []


class BackupFile(BaseModel):
    version: str = BACKUP_VERSION
    timestamp: datetime
    data: BackupData


class BackupImport(BaseModel):
    """Contenu d'un fichier importé : seul `data` est exigé."""
    version: str = BACKUP_VERSION
    data: Dict[str, Any]

    @field_validator("data")
    @classmethod
    def required_collections(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        for key in REQUIRED_COLLECTIONS:
            if not isinstance(v.get(key), list):
                raise ValueError(f"Format de sauvegarde invalide : la collection '{key}' est manquante.")
        return v


class ImportResult(BaseModel):
    success: bool
    imported: Dict[str, int]
    skipped_logs: int


class SeedResult(BaseModel):
    seeded: bool
    message: str
