"""
Tests d'intégration API pour les demandes de maintenance et les paiements.
"""

import uuid
from datetime import date, datetime
from unittest.mock import patch

from app.schemas.maintenance import MaintenanceDetail, MaintenanceResponse


def make_maintenance_response(**kwargs) -> MaintenanceResponse:
    return MaintenanceResponse(
        id=kwargs.get("id", uuid.uuid4()),
        car_uin="CAR001",
        client_id=uuid.uuid4(),
        services_used=[],
        products_used=[],
        additional_fee=0,
        discount=0,
        discount_justification=None,
        total_cost=kwargs.get("total_cost", 100.0),
        paid_amount=kwargs.get("paid_amount", 0),
        remaining_balance=kwargs.get("remaining_balance", 100.0),
        payment_status=kwargs.get("payment_status", "pending"),
        start_date=date(2024, 5, 1),
        end_date=None,
        status="pending",
        created_at=datetime.now(),
        updated_at=datetime.now(),
    )


def maintenance_payload(**kwargs):
    payload = {"car_uin": "CAR001", "client_id": str(uuid.uuid4()), "start_date": "2024-05-01"}
    payload.update(kwargs)
    return payload


# ============================================================
# POST /api/v1/maintenance
# ============================================================

def test_create_maintenance_succes(client):
    with patch("app.routers.maintenance.maintenance_service.create_maintenance") as mock:
        mock.return_value = make_maintenance_response()
        response = client.post("/api/v1/maintenance", json=maintenance_payload(
            products_used=[{"product_id": str(uuid.uuid4()), "quantity": 2, "stock_source": "warehouse"}],
        ))
    assert response.status_code == 201
    assert response.json()["payment_status"] == "pending"


def test_create_maintenance_stock_insuffisant(client):
    with patch("app.routers.maintenance.maintenance_service.create_maintenance") as mock:
        mock.side_effect = ValueError("Stock insuffisant pour Oil Filter (shop) : 1 disponible(s), 2 demandé(s).")
        response = client.post("/api/v1/maintenance", json=maintenance_payload())
    assert response.status_code == 400


def test_create_maintenance_vehicule_introuvable(client):
    with patch("app.routers.maintenance.maintenance_service.create_maintenance") as mock:
        mock.side_effect = ValueError("Véhicule introuvable.")
        response = client.post("/api/v1/maintenance", json=maintenance_payload())
    assert response.status_code == 404


def test_create_maintenance_source_invalide(client):
    response = client.post("/api/v1/maintenance", json=maintenance_payload(
        products_used=[{"product_id": str(uuid.uuid4()), "quantity": 1, "stock_source": "garage"}],
    ))
    assert response.status_code == 422


def test_create_maintenance_statut_invalide(client):
    response = client.post("/api/v1/maintenance", json=maintenance_payload(status="done"))
    assert response.status_code == 422


# ============================================================
# Lecture
# ============================================================

def test_list_enriched(client):
    base = make_maintenance_response()
    detail = MaintenanceDetail(
        **base.model_dump(),
        client_name="John Doe",
        car_details="Toyota Camry (ABC123)",
        service_details=[],
        product_details=[],
    )
    with patch("app.routers.maintenance.maintenance_service.get_enriched", return_value=[detail]):
        response = client.get("/api/v1/maintenance/enriched")

    assert response.status_code == 200
    assert response.json()[0]["car_details"] == "Toyota Camry (ABC123)"


def test_get_maintenance_introuvable(client):
    with patch("app.routers.maintenance.maintenance_service.get_maintenance_detail", return_value=None):
        response = client.get(f"/api/v1/maintenance/{uuid.uuid4()}")
    assert response.status_code == 404


def test_delete_maintenance_introuvable(client):
    with patch("app.routers.maintenance.maintenance_service.delete_maintenance", return_value=False):
        response = client.delete(f"/api/v1/maintenance/{uuid.uuid4()}")
    assert response.status_code == 404


# ============================================================
# Paiements
# ============================================================

def test_payment_succes(client):
    with patch("app.routers.maintenance.maintenance_service.make_payment") as mock:
        mock.return_value = make_maintenance_response(paid_amount=100, remaining_balance=0, payment_status="paid")
        response = client.post(f"/api/v1/maintenance/{uuid.uuid4()}/payments", json={"amount": 100})

    assert response.status_code == 200
    assert response.json()["payment_status"] == "paid"
    assert response.json()["remaining_balance"] == 0


def test_payment_montant_negatif(client):
    response = client.post(f"/api/v1/maintenance/{uuid.uuid4()}/payments", json={"amount": -10})
    assert response.status_code == 422


def test_payment_introuvable(client):
    with patch("app.routers.maintenance.maintenance_service.make_payment", return_value=None):
        response = client.post(f"/api/v1/maintenance/{uuid.uuid4()}/payments", json={"amount": 10})
    assert response.status_code == 404
