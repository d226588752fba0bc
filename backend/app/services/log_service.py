"""
Service du journal d'audit.

Chaque mutation métier appelle `record()` avant son commit : l'entrée est
ajoutée à la même session et partage donc la transaction de la mutation.
"""

import json
import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.database import utc_now
from app.models.log_entry import LogEntry
from app.schemas.log_entry import LogFilter
from app.services.date_ranges import resolve_range

logger = logging.getLogger(__name__)

REFERENCE_FIELDS = (
    "client_id", "car_uin", "insurance_id", "service_id", "product_id", "maintenance_id",
    "start_date", "end_date", "payment_amount", "discount", "additional_fees", "remaining_balance",
)


def snapshot(obj: Any) -> Optional[dict]:
    """Sérialise les colonnes d'un modèle (ou retourne le dict tel quel)."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj
    return {col.name: getattr(obj, col.name) for col in obj.__table__.columns}


def _to_json(value: Any) -> Optional[str]:
    data = snapshot(value)
    if data is None:
        return None
    return json.dumps(data, default=str)


def record(
    db: Session,
    action_type: str,
    table_name: str,
    before: Any = None,
    after: Any = None,
    **refs,
) -> LogEntry:
    """
    Ajoute une entrée d'audit à la session (sans commit).
    `refs` accepte les colonnes de référence (client_id, car_uin, payment_amount...).
    """
    unknown = set(refs) - set(REFERENCE_FIELDS)
    if unknown:
        raise ValueError(f"Champs de journal inconnus : {sorted(unknown)}")

    values = {
        key: (str(value) if key.endswith(("_id", "_uin")) and value is not None else value)
        for key, value in refs.items()
    }
    entry = LogEntry(
        action_type=action_type,
        table_name=table_name,
        admin_name=settings.ADMIN_NAME,
        timestamp=utc_now(),
        before_value=_to_json(before),
        after_value=_to_json(after),
        **values,
    )
    db.add(entry)
    return entry


def get_logs(db: Session) -> list[LogEntry]:
    """Retourne tout l'historique, du plus récent au plus ancien."""
    return db.execute(
        select(LogEntry).order_by(LogEntry.timestamp.desc())
    ).scalars().all()


def get_filtered(db: Session, filters: LogFilter) -> list[LogEntry]:
    """Historique filtré par égalité stricte sur les champs fournis."""
    query = select(LogEntry)
    for field, value in filters.model_dump(exclude_none=True).items():
        query = query.where(getattr(LogEntry, field) == value)
    return db.execute(query.order_by(LogEntry.timestamp.desc())).scalars().all()


def get_by_date_range(
    db: Session,
    start: date,
    end: Optional[date] = None,
    granularity: str = "day",
) -> list[LogEntry]:
    """Historique d'une période (voir date_ranges.resolve_range)."""
    first, last = resolve_range(start, end, granularity)
    return db.execute(
        select(LogEntry)
        .where(LogEntry.timestamp >= first, LogEntry.timestamp <= last)
        .order_by(LogEntry.timestamp.desc())
    ).scalars().all()
