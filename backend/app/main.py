"""
Point d'entrée principal de l'API GarageDesk.
Démarrage : uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app.models  # noqa: F401 : enregistre tous les modèles dans Base.metadata avant les routers
from app.config import settings
from app.database import init_db
from app.routers import (
    backup,
    cars,
    clients,
    employees,
    finances,
    insurance,
    logs,
    maintenance,
    ping,
    products,
    reports,
    services,
    suppliers,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : crée les tables si la configuration le demande."""
    if settings.CREATE_TABLES_ON_STARTUP:
        init_db()
        logger.info("Tables vérifiées / créées.")
    yield


app = FastAPI(
    title="GarageDesk API",
    description="API de gestion de garage : clients, véhicules, maintenance, stock, finances",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
# allow_origin_regex est nécessaire pour les requêtes preflight POST avec Content-Type JSON.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "HEAD", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Accept", "Cache-Control", "Pragma", "Expires"],
)


app.include_router(ping.router)
app.include_router(clients.router)
app.include_router(cars.router)
app.include_router(insurance.router)
app.include_router(services.router)
app.include_router(suppliers.router)
app.include_router(products.router)
app.include_router(maintenance.router)
app.include_router(employees.router)
app.include_router(finances.router)
app.include_router(reports.router)
app.include_router(logs.router)
app.include_router(backup.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour que la réponse 500
    passe par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "GarageDesk API", "version": "0.1.0"}
