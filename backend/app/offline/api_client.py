"""
Client HTTP du poste de travail avec repli hors ligne.

En ligne, la requête part directement vers le serveur. Hors ligne :
- une requête exigeant le réseau (offline_fallback=False) échoue
- une lecture (GET) échoue : aucune donnée ne peut être récupérée
- une écriture est mise en file et le payload est renvoyé tel quel,
  marqué offline=True (affichage optimiste)
"""

import logging
from typing import Any, Callable, Optional

import httpx

from app.config import settings
from app.offline.network import check_connectivity
from app.offline.storage import OfflineQueue
from app.schemas.sync import ApiResult

logger = logging.getLogger(__name__)

OFFLINE_REQUIRED_ERROR = "Le réseau est indisponible et cette action nécessite une connexion internet."
OFFLINE_READ_ERROR = "Impossible de récupérer des données hors ligne."
QUEUED_MESSAGE = "Vous êtes hors ligne : vos modifications sont enregistrées localement et seront synchronisées à la reconnexion."

Notifier = Callable[[str, str], None]


def build_http_client(base_url: Optional[str] = None) -> httpx.Client:
    return httpx.Client(
        base_url=base_url or settings.API_BASE_URL,
        timeout=httpx.Timeout(settings.REQUEST_TIMEOUT_SECONDS, connect=settings.PING_TIMEOUT_SECONDS),
        headers={"Content-Type": "application/json", "Accept": "application/json"},
    )


class ApiClient:
    """Appels API avec détection de connectivité et mise en file des écritures hors ligne."""

    def __init__(
        self,
        queue: OfflineQueue,
        http: Optional[httpx.Client] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.queue = queue
        self.http = http or build_http_client()
        self.notifier = notifier

    def request(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        offline_fallback: bool = True,
    ) -> ApiResult:
        method = method.upper()
        if check_connectivity(self.http, settings.PING_TIMEOUT_SECONDS):
            return self._send(method, endpoint, body)

        if not offline_fallback:
            return ApiResult(error=OFFLINE_REQUIRED_ERROR, offline=True)
        if method == "GET":
            return ApiResult(error=OFFLINE_READ_ERROR, offline=True)

        self.queue.enqueue(method, endpoint, body)
        self._notify("Hors ligne", QUEUED_MESSAGE)
        return ApiResult(data=body, offline=True)

    def get(self, endpoint: str, offline_fallback: bool = True) -> ApiResult:
        return self.request("GET", endpoint, offline_fallback=offline_fallback)

    def post(self, endpoint: str, data: Any, offline_fallback: bool = True) -> ApiResult:
        return self.request("POST", endpoint, data, offline_fallback)

    def put(self, endpoint: str, data: Any, offline_fallback: bool = True) -> ApiResult:
        return self.request("PUT", endpoint, data, offline_fallback)

    def delete(self, endpoint: str, offline_fallback: bool = True) -> ApiResult:
        return self.request("DELETE", endpoint, offline_fallback=offline_fallback)

    def _send(self, method: str, endpoint: str, body: Any) -> ApiResult:
        try:
            response = self.http.request(method, endpoint, json=body)
        except httpx.HTTPError as e:
            logger.error("Requête API échouée : %s %s : %s", method, endpoint, e)
            return ApiResult(error=str(e))

        if not response.is_success:
            return ApiResult(error=f"Erreur API : {response.status_code} {response.reason_phrase}")

        # 204 : FastAPI annonce application/json mais le corps est vide
        content_type = response.headers.get("content-type", "")
        if response.status_code == 204 or not response.content or "application/json" not in content_type:
            return ApiResult(data=None)
        try:
            return ApiResult(data=response.json())
        except ValueError as e:
            logger.error("Réponse JSON invalide : %s %s : %s", method, endpoint, e)
            return ApiResult(error=f"Réponse invalide du serveur : {e}")

    def _notify(self, title: str, message: str) -> None:
        logger.info("%s : %s", title, message)
        if self.notifier is not None:
            self.notifier(title, message)
