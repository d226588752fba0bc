"""
Router de la sonde de connectivité utilisée par les postes de travail.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Response

router = APIRouter(prefix="/api", tags=["Santé"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("/ping", summary="Ping")
def ping(response: Response):
    """Retourne un horodatage serveur ; jamais mis en cache."""
    response.headers.update(NO_CACHE_HEADERS)
    return {"success": True, "timestamp": datetime.now(timezone.utc).isoformat()}


@router.head("/ping", summary="Ping (HEAD)")
def ping_head():
    return Response(status_code=200, headers=NO_CACHE_HEADERS)
