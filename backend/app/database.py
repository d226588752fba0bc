"""
Connexion SQLAlchemy de l'API GarageDesk (PostgreSQL en production).
Moteur et sessions synchrones, une session par requête via get_db.
"""

from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings

# pool_pre_ping : le serveur peut rester inactif longtemps entre deux postes de travail
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def utc_now() -> datetime:
    """Horodatage UTC naïf : toutes les colonnes DateTime sont en UTC, quel que soit le fuseau du serveur SQL."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_db():
    """Dépendance FastAPI : ouvre une session pour la requête, la ferme ensuite."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Crée les tables manquantes (développement ; la production gère son schéma à part)."""
    import app.models  # noqa: F401 : enregistre tous les modèles dans Base.metadata
    Base.metadata.create_all(bind=engine)
