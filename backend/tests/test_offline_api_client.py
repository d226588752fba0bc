"""
Tests unitaires pour le client API du poste de travail :
appels en ligne, refus hors ligne et mise en file des écritures.
"""

import httpx
import pytest

from app.offline.api_client import OFFLINE_READ_ERROR, OFFLINE_REQUIRED_ERROR, ApiClient
from app.offline.storage import OfflineQueue, open_local_db

BASE_URL = "http://garage.test"


# --- Helpers ---

def make_http(handler, online=True):
    """Client httpx simulé : la sonde /api/ping répond selon `online`, le reste via `handler`."""
    def dispatch(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/ping":
            if not online:
                raise httpx.ConnectError("connexion refusée", request=request)
            return httpx.Response(200)
        return handler(request)

    return httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(dispatch))


@pytest.fixture
def queue():
    return OfflineQueue(open_local_db("sqlite://"))


# ============================================================
# En ligne
# ============================================================

def test_get_en_ligne_decode_le_json(queue):
    http = make_http(lambda r: httpx.Response(200, json=[{"name": "John"}]))
    result = ApiClient(queue, http).get("/api/v1/clients")

    assert result.ok
    assert result.data == [{"name": "John"}]
    assert result.offline is False


def test_reponse_non_json(queue):
    http = make_http(lambda r: httpx.Response(204))
    result = ApiClient(queue, http).delete("/api/v1/clients/1")

    assert result.ok
    assert result.data is None


def test_delete_204_avec_content_type_json(queue):
    """Réponse des routes DELETE de l'API : 204, application/json, corps vide."""
    http = make_http(lambda r: httpx.Response(204, headers={"content-type": "application/json"}))
    result = ApiClient(queue, http).delete("/api/v1/maintenance/1")

    assert result.ok
    assert result.data is None


def test_json_invalide(queue):
    http = make_http(lambda r: httpx.Response(200, headers={"content-type": "application/json"}, content=b"{oops"))
    result = ApiClient(queue, http).get("/api/v1/clients")

    assert not result.ok
    assert result.error.startswith("Réponse invalide du serveur")


def test_erreur_http(queue):
    http = make_http(lambda r: httpx.Response(409, json={"detail": "conflit"}))
    result = ApiClient(queue, http).post("/api/v1/cars", {"uin": "CAR001"})

    assert result.error.startswith("Erreur API : 409")
    assert queue.pending_count() == 0


def test_post_envoie_le_corps(queue):
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = request.content
        return httpx.Response(201, json={"id": "1"})

    ApiClient(queue, make_http(handler)).post("/api/v1/clients", {"name": "Jane"})

    assert seen["method"] == "POST"
    assert b"Jane" in seen["body"]


# ============================================================
# Hors ligne
# ============================================================

def test_get_hors_ligne(queue):
    http = make_http(lambda r: httpx.Response(200), online=False)
    result = ApiClient(queue, http).get("/api/v1/clients")

    assert result.error == OFFLINE_READ_ERROR
    assert result.offline is True
    assert queue.pending_count() == 0


def test_ecriture_hors_ligne_mise_en_file(queue):
    notifications = []
    http = make_http(lambda r: httpx.Response(200), online=False)
    client = ApiClient(queue, http, notifier=lambda title, msg: notifications.append(title))

    result = client.put("/api/v1/cars/CAR001", {"color": "Red"})

    assert result.ok
    assert result.offline is True
    assert result.data == {"color": "Red"}
    pending = queue.list_pending()
    assert pending[0].method == "PUT"
    assert pending[0].url == "/api/v1/cars/CAR001"
    assert notifications == ["Hors ligne"]


def test_hors_ligne_sans_repli(queue):
    http = make_http(lambda r: httpx.Response(200), online=False)
    result = ApiClient(queue, http).post("/api/v1/backup", {"data": {}}, offline_fallback=False)

    assert result.error == OFFLINE_REQUIRED_ERROR
    assert queue.pending_count() == 0
