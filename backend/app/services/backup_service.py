"""
Service de sauvegarde / restauration complète de la base.

Format (version 1.0) :
    {"version": "1.0", "timestamp": ..., "data": {"clients": [...], "cars": [...], ...}}

À l'import, chaque collection non vide remplace intégralement la collection
existante ; le journal d'audit n'est jamais effacé : les entrées importées
sont ajoutées en ignorant les identifiants déjà connus.
"""

import uuid
import logging
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import Date, DateTime, delete, select
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import utc_now
from app.models.car import Car
from app.models.client import Client
from app.models.insurance import Insurance
from app.models.log_entry import LogEntry
from app.models.maintenance import MaintenanceProduct, MaintenanceRequest, MaintenanceService
from app.models.product import Product
from app.models.service import Service
from app.models.supplier import Supplier
from app.schemas.backup import BACKUP_VERSION, BackupData, BackupFile, BackupImport, ImportResult
from app.services import log_service, maintenance_service

logger = logging.getLogger(__name__)

# Collections simples, dans l'ordre d'insertion (parents avant enfants)
SIMPLE_COLLECTIONS = [
    ("clients", Client),
    ("insurance", Insurance),
    ("suppliers", Supplier),
    ("services", Service),
    ("products", Product),
    ("cars", Car),
]


def export_backup(db: Session) -> BackupFile:
    """Instantané complet de la base (maintenance avec ses lignes, journal compris)."""
    data = {
        name: [log_service.snapshot(obj) for obj in db.execute(select(model)).scalars().all()]
        for name, model in SIMPLE_COLLECTIONS
    }
    data["maintenance"] = [r.model_dump() for r in maintenance_service.get_all(db)]
    data["logs"] = [
        log_service.snapshot(entry)
        for entry in db.execute(select(LogEntry).order_by(LogEntry.timestamp)).scalars().all()
    ]

    logger.info("Sauvegarde exportée : %s", {k: len(v) for k, v in data.items()})
    return BackupFile(version=BACKUP_VERSION, timestamp=utc_now(), data=BackupData(**data))


def import_backup(db: Session, backup: BackupImport) -> ImportResult:
    """
    Restaure une sauvegarde dans une seule transaction.
    Lève ValueError si les données importées violent une contrainte
    (référence vers un enregistrement absent, doublon...) ou si le remplacement
    d'une collection laisserait des lignes existantes sans parent
    (ex : clients remplacés alors que des véhicules non importés les référencent).
    Dans tous ces cas, rien n'est modifié.
    """
    if _version_tuple(backup.version) > _version_tuple(BACKUP_VERSION):
        logger.warning(
            "Sauvegarde en version %s, plus récente que %s : certaines données peuvent être ignorées",
            backup.version, BACKUP_VERSION,
        )

    try:
        imported, skipped_logs = _replace_collections(db, backup.data)
        log_service.record(db, "create", "system", after={"message": "Base restaurée depuis une sauvegarde", **imported})
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Import de sauvegarde refusé : %s", e.orig)
        raise ValueError("Sauvegarde incohérente : une référence ou un identifiant est invalide.")

    logger.info("Sauvegarde importée : %s (%d entrée(s) de journal ignorée(s))", imported, skipped_logs)
    return ImportResult(success=True, imported=imported, skipped_logs=skipped_logs)


def _replace_collections(db: Session, data: dict) -> tuple[dict, int]:
    """Supprime puis réinsère les collections non vides ; ajoute les logs inconnus (sans commit)."""
    replaced = [(name, model) for name, model in SIMPLE_COLLECTIONS if data.get(name)]
    replace_maintenance = bool(data.get("maintenance"))
    imported = {}

    # Suppression des enfants avant les parents
    if replace_maintenance:
        db.execute(delete(MaintenanceProduct))
        db.execute(delete(MaintenanceService))
        db.execute(delete(MaintenanceRequest))
    for _, model in reversed(replaced):
        db.execute(delete(model))

    for name, model in replaced:
        db.add_all([_row_from_dict(model, item) for item in data[name]])
        imported[name] = len(data[name])

    if replace_maintenance:
        for item in data["maintenance"]:
            _import_maintenance(db, item)
        imported["maintenance"] = len(data["maintenance"])

    skipped_logs = 0
    logs = data.get("logs") or []
    if logs:
        known_ids = {str(i) for i in db.execute(select(LogEntry.id)).scalars().all()}
        added = 0
        for item in logs:
            if item.get("id") and str(item["id"]) in known_ids:
                skipped_logs += 1
                continue
            db.add(_row_from_dict(LogEntry, item))
            added += 1
        imported["logs"] = added

    db.flush()
    return imported, skipped_logs


def _import_maintenance(db: Session, item: dict) -> None:
    """Recrée une demande et ses lignes telles quelles (sans mouvement de stock)."""
    request = _row_from_dict(MaintenanceRequest, item)
    db.add(request)
    db.flush()
    for line in item.get("services_used") or []:
        db.add(_row_from_dict(MaintenanceService, {**line, "maintenance_id": request.id}))
    for line in item.get("products_used") or []:
        db.add(_row_from_dict(MaintenanceProduct, {**line, "maintenance_id": request.id}))


def _row_from_dict(model, item: dict[str, Any]):
    """Construit une instance du modèle en ne gardant que ses colonnes, converties au bon type."""
    values = {}
    for col in model.__table__.columns:
        if col.name not in item:
            continue
        values[col.name] = _coerce(col.type, item[col.name])
    return model(**values)


def _coerce(column_type, value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(column_type, UUID) and not isinstance(value, uuid.UUID):
        return uuid.UUID(str(value))
    if isinstance(column_type, DateTime) and isinstance(value, str):
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
        return moment
    if isinstance(column_type, Date) and isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value


def _version_tuple(version: str) -> tuple[int, ...]:
    try:
        return tuple(int(part) for part in version.split("."))
    except ValueError:
        return (0,)
