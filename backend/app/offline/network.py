"""
Sonde de connectivité du poste de travail : HEAD /api/ping sur le serveur.
"""

import logging
import time

import httpx

logger = logging.getLogger(__name__)

PING_PATH = "/api/ping"
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def check_connectivity(http: httpx.Client, timeout: float | None = None) -> bool:
    """True si le serveur répond 2xx au ping ; toute erreur réseau compte comme hors ligne."""
    try:
        response = http.head(
            PING_PATH,
            params={"t": int(time.time() * 1000)},
            headers=NO_CACHE_HEADERS,
            timeout=timeout if timeout is not None else http.timeout,
        )
    except httpx.HTTPError as e:
        logger.debug("Ping échoué : %s", e)
        return False
    return response.is_success
