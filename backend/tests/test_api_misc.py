"""
Tests d'intégration API : ping, journal d'audit, rapports,
sauvegarde / restauration et données de démonstration.
"""

import json
import uuid
from datetime import datetime
from unittest.mock import patch

from app.schemas.backup import ImportResult, SeedResult
from app.schemas.log_entry import LogEntryResponse


def make_log_response(**kwargs) -> LogEntryResponse:
    return LogEntryResponse(
        id=uuid.uuid4(),
        action_type=kwargs.get("action_type", "create"),
        table_name=kwargs.get("table_name", "clients"),
        timestamp=datetime.now(),
        admin_name="System",
        client_id=kwargs.get("client_id"),
    )


def backup_body(**overrides):
    data = {"clients": [], "cars": [], "services": [], "products": [], "maintenance": []}
    data.update(overrides)
    return {"version": "1.0", "data": data}


# ============================================================
# Ping et santé
# ============================================================

def test_ping_get(client):
    response = client.get("/api/ping")
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert "timestamp" in response.json()
    assert "no-cache" in response.headers["cache-control"]


def test_ping_head(client):
    response = client.head("/api/ping")
    assert response.status_code == 200
    assert response.headers["pragma"] == "no-cache"


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200


# ============================================================
# Journal d'audit
# ============================================================

def test_list_logs(client):
    with patch("app.routers.logs.log_service.get_logs", return_value=[make_log_response()]):
        response = client.get("/api/v1/logs")
    assert response.status_code == 200
    assert response.json()[0]["table_name"] == "clients"


def test_filter_logs_action_invalide(client):
    response = client.post("/api/v1/logs/filter", json={"action_type": "drop"})
    assert response.status_code == 422


def test_filter_logs_transmet_les_filtres(client):
    with patch("app.routers.logs.log_service.get_filtered", return_value=[]) as mock:
        response = client.post("/api/v1/logs/filter", json={"table_name": "cars", "car_uin": "CAR001"})
    assert response.status_code == 200
    filters = mock.call_args[0][1]
    assert filters.table_name == "cars"
    assert filters.client_id is None


def test_logs_range_granularite_invalide(client):
    with patch("app.routers.logs.log_service.get_by_date_range") as mock:
        mock.side_effect = ValueError("Granularité invalide.")
        response = client.get("/api/v1/logs/range?start=2024-05-01&granularity=decade")
    assert response.status_code == 400


# ============================================================
# Rapports
# ============================================================

def test_analytics_periode_invalide(client):
    with patch("app.routers.reports.report_service.system_analytics") as mock:
        mock.side_effect = ValueError("Période invalide.")
        response = client.get("/api/v1/reports/analytics?period=decade")
    assert response.status_code == 400


def test_daily_report_date_invalide(client):
    with patch("app.routers.reports.report_service.daily_report") as mock:
        mock.side_effect = ValueError("Format de date invalide. Format attendu : YYYY-MM-DD")
        response = client.get("/api/v1/reports/daily/01-05-2024")
    assert response.status_code == 400


def test_cars_by_date_range(client):
    with patch("app.routers.reports.report_service.cars_by_date_range", return_value=[]) as mock:
        response = client.get("/api/v1/reports/cars?start=2024-05-01&end=2024-05-31")
    assert response.status_code == 200
    assert mock.call_args[0][1:] == ("2024-05-01", "2024-05-31")


def test_maintenance_by_date_range_bornes_manquantes(client):
    response = client.get("/api/v1/reports/maintenance?start=2024-05-01")
    assert response.status_code == 422


# ============================================================
# Sauvegarde / restauration
# ============================================================

def test_import_backup_collection_manquante(client):
    body = backup_body()
    del body["data"]["products"]
    response = client.post("/api/v1/backup", json=body)
    assert response.status_code == 422


def test_import_backup_incoherent(client):
    with patch("app.routers.backup.backup_service.import_backup") as mock:
        mock.side_effect = ValueError("Sauvegarde incohérente.")
        response = client.post("/api/v1/backup", json=backup_body())
    assert response.status_code == 409


def test_upload_backup_succes(client):
    content = ("\ufeff" + json.dumps(backup_body())).encode("utf-8")
    with patch("app.routers.backup.backup_service.import_backup") as mock:
        mock.return_value = ImportResult(success=True, imported={}, skipped_logs=0)
        response = client.post(
            "/api/v1/backup/upload",
            files={"file": ("backup.json", content, "application/json")},
        )
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_upload_backup_json_invalide(client):
    response = client.post(
        "/api/v1/backup/upload",
        files={"file": ("backup.json", b"{pas du json", "application/json")},
    )
    assert response.status_code == 400


def test_upload_backup_vide(client):
    response = client.post("/api/v1/backup/upload", files={"file": ("backup.json", b"", "application/json")})
    assert response.status_code == 400


def test_seed_base_non_vide(client):
    with patch("app.routers.backup.seed_service.seed_database") as mock:
        mock.return_value = SeedResult(seeded=False, message="La base contient déjà des données.")
        response = client.post("/api/v1/seed")
    assert response.status_code == 200
    assert response.json()["seeded"] is False


def test_seed_utilise_la_session_de_la_requete(client, mock_db):
    with patch("app.routers.backup.seed_service.seed_database") as mock:
        mock.return_value = SeedResult(seeded=True, message="Données de démonstration insérées.")
        client.post("/api/v1/seed")
    mock.assert_called_once_with(mock_db)
