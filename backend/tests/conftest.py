"""
Fixtures partagées des tests d'API GarageDesk.
get_db est remplacée par une session MagicMock : aucun test ne touche PostgreSQL.
Les tests qui dépendent des contraintes réelles (clés étrangères, valeurs par
défaut des colonnes) utilisent `sqlite_db`, une base SQLite en mémoire.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock

from app import models  # noqa: F401 : enregistre tous les modèles dans Base.metadata
from app.database import Base, get_db
from app.main import app


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def client(mock_db):
    """TestClient de l'API ; la session injectée dans les routers est `mock_db`."""
    app.dependency_overrides[get_db] = lambda: mock_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sqlite_db():
    """Session sur une base SQLite en mémoire, clés étrangères activées."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, _record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
