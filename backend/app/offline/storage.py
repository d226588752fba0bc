"""
Stockage local persistant du poste de travail (SQLite).

Deux tables indépendantes :
- offline_queue : écritures HTTP en attente, rejouées dans l'ordre d'insertion
- offline_cache : cache clé/valeur de données consultables hors ligne

Vider le cache ne touche jamais la file d'attente.
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, create_engine, delete, func, select
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.schemas.sync import QueuedOperation

logger = logging.getLogger(__name__)

# Base distincte de celle du serveur : ces tables n'existent que sur le poste
OfflineBase = declarative_base()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PendingOperation(OfflineBase):
    __tablename__ = "offline_queue"

    seq = Column(Integer, primary_key=True, autoincrement=True)   # Ordre d'insertion
    id = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    timestamp = Column(DateTime, nullable=False, default=_utc_now)
    method = Column(String(10), nullable=False)
    url = Column(Text, nullable=False)
    payload = Column(JSON, nullable=True)
    retry_count = Column(Integer, nullable=False, default=0)


class CachedEntry(OfflineBase):
    __tablename__ = "offline_cache"

    key = Column(String(255), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=_utc_now, onupdate=_utc_now)


def open_local_db(url: Optional[str] = None) -> sessionmaker:
    """Ouvre (et crée si besoin) la base locale ; retourne une fabrique de sessions."""
    url = url or settings.OFFLINE_DB_URL
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool  # une seule base en mémoire partagée
    engine = create_engine(url, **kwargs)
    OfflineBase.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


class OfflineQueue:
    """File d'écritures en attente ; chaque opération ouvre sa propre session."""

    def __init__(self, session_factory: sessionmaker):
        self.Session = session_factory

    def enqueue(self, method: str, url: str, payload: Any = None) -> QueuedOperation:
        """Ajoute une écriture en fin de file et la retourne."""
        with self.Session() as session:
            op = PendingOperation(method=method.upper(), url=url, payload=payload)
            session.add(op)
            session.commit()
            session.refresh(op)
            logger.info("Opération mise en file : %s %s (%s)", op.method, op.url, op.id)
            return QueuedOperation.model_validate(op)

    def list_pending(self) -> list[QueuedOperation]:
        """Opérations en attente, dans l'ordre d'insertion."""
        with self.Session() as session:
            ops = session.execute(select(PendingOperation).order_by(PendingOperation.seq)).scalars().all()
            return [QueuedOperation.model_validate(op) for op in ops]

    def remove(self, operation_id: str) -> bool:
        with self.Session() as session:
            result = session.execute(delete(PendingOperation).where(PendingOperation.id == operation_id))
            session.commit()
            return result.rowcount > 0

    def update_retry_count(self, operation_id: str, retry_count: int) -> bool:
        with self.Session() as session:
            op = session.execute(
                select(PendingOperation).where(PendingOperation.id == operation_id)
            ).scalar_one_or_none()
            if op is None:
                return False
            op.retry_count = retry_count
            session.commit()
            return True

    def pending_count(self) -> int:
        with self.Session() as session:
            return session.execute(select(func.count()).select_from(PendingOperation)).scalar() or 0

    def has_pending(self) -> bool:
        return self.pending_count() > 0


class OfflineCache:
    """Cache clé/valeur des données consultables hors ligne."""

    def __init__(self, session_factory: sessionmaker):
        self.Session = session_factory

    def store(self, key: str, value: Any) -> None:
        with self.Session() as session:
            entry = session.get(CachedEntry, key)
            if entry is None:
                session.add(CachedEntry(key=key, value=value))
            else:
                entry.value = value
                entry.updated_at = _utc_now()
            session.commit()

    def get(self, key: str, default: Any = None) -> Any:
        with self.Session() as session:
            entry = session.get(CachedEntry, key)
            return entry.value if entry is not None else default

    def remove(self, key: str) -> bool:
        with self.Session() as session:
            result = session.execute(delete(CachedEntry).where(CachedEntry.key == key))
            session.commit()
            return result.rowcount > 0

    def clear(self) -> int:
        """Vide le cache (la file d'attente est conservée). Retourne le nombre d'entrées supprimées."""
        with self.Session() as session:
            result = session.execute(delete(CachedEntry))
            session.commit()
            return result.rowcount
