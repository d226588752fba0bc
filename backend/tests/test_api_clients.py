"""
Tests d'intégration API pour les clients et les véhicules.
Testent les URLs, les codes HTTP, la validation et le format des réponses.
"""

import uuid
from datetime import datetime
from unittest.mock import patch

from app.schemas.car import CarResponse
from app.schemas.client import ClientResponse
from app.schemas.detail import CarHistory, ClientWithCars


# --- Helpers ---

def make_client_response(**kwargs) -> ClientResponse:
    return ClientResponse(
        id=kwargs.get("id", uuid.uuid4()),
        name=kwargs.get("name", "John Doe"),
        contact=kwargs.get("contact", "555-1234"),
        email=kwargs.get("email", "john@example.com"),
        address=kwargs.get("address"),
        created_at=datetime.now(),
        updated_at=datetime.now(),
    )


def make_car_response(**kwargs) -> CarResponse:
    return CarResponse(
        uin=kwargs.get("uin", "CAR001"),
        license_plate=kwargs.get("license_plate", "ABC123"),
        make="Toyota",
        model="Camry",
        year=2020,
        vin=None,
        color="Silver",
        client_id=kwargs.get("client_id", uuid.uuid4()),
        insurance_id=None,
        created_at=datetime.now(),
        updated_at=datetime.now(),
    )


# ============================================================
# /api/v1/clients
# ============================================================

def test_create_client_succes(client):
    with patch("app.routers.clients.client_service.create_client") as mock:
        mock.return_value = make_client_response(name="Jane Smith")
        response = client.post("/api/v1/clients", json={"name": "Jane Smith", "email": "jane@example.com"})

    assert response.status_code == 201
    assert response.json()["name"] == "Jane Smith"


def test_create_client_nom_vide(client):
    response = client.post("/api/v1/clients", json={"name": "  "})
    assert response.status_code == 422


def test_create_client_email_invalide(client):
    response = client.post("/api/v1/clients", json={"name": "Jane", "email": "pas-un-email"})
    assert response.status_code == 422


def test_get_client_introuvable(client):
    with patch("app.routers.clients.client_service.get_client", return_value=None):
        response = client.get(f"/api/v1/clients/{uuid.uuid4()}")
    assert response.status_code == 404


def test_get_client_uuid_invalide(client):
    response = client.get("/api/v1/clients/pas-un-uuid")
    assert response.status_code == 422


def test_get_client_avec_vehicules(client):
    owner = make_client_response()
    with patch("app.routers.clients.client_service.get_client_with_cars") as mock:
        mock.return_value = ClientWithCars(client=owner, cars=[make_car_response(client_id=owner.id)])
        response = client.get(f"/api/v1/clients/{owner.id}/cars")

    assert response.status_code == 200
    assert response.json()["cars"][0]["uin"] == "CAR001"


def test_delete_client_avec_vehicules(client):
    """Client possédant des véhicules → 409."""
    with patch("app.routers.clients.client_service.delete_client") as mock:
        mock.side_effect = ValueError("Impossible de supprimer ce client : des véhicules lui sont associés.")
        response = client.delete(f"/api/v1/clients/{uuid.uuid4()}")

    assert response.status_code == 409
    assert "véhicules" in response.json()["detail"]


def test_delete_client_succes(client):
    with patch("app.routers.clients.client_service.delete_client", return_value=True):
        response = client.delete(f"/api/v1/clients/{uuid.uuid4()}")
    assert response.status_code == 204


# ============================================================
# /api/v1/cars
# ============================================================

def car_payload(**kwargs):
    payload = {
        "uin": "CAR001", "license_plate": "ABC123", "make": "Toyota",
        "model": "Camry", "client_id": str(uuid.uuid4()),
    }
    payload.update(kwargs)
    return payload


def test_create_car_succes(client):
    with patch("app.routers.cars.car_service.create_car") as mock:
        mock.return_value = make_car_response()
        response = client.post("/api/v1/cars", json=car_payload(insurance_id="none"))

    assert response.status_code == 201
    assert mock.call_args[0][1].insurance_id is None


def test_create_car_uin_duplique(client):
    with patch("app.routers.cars.car_service.create_car") as mock:
        mock.side_effect = ValueError("Un véhicule avec l'UIN CAR001 existe déjà.")
        response = client.post("/api/v1/cars", json=car_payload())
    assert response.status_code == 409


def test_create_car_client_introuvable(client):
    with patch("app.routers.cars.car_service.create_car") as mock:
        mock.side_effect = ValueError("Client introuvable.")
        response = client.post("/api/v1/cars", json=car_payload())
    assert response.status_code == 404


def test_create_car_champs_manquants(client):
    response = client.post("/api/v1/cars", json={"uin": "CAR001"})
    assert response.status_code == 422


def test_get_car_history(client):
    car = make_car_response()
    with patch("app.routers.cars.car_service.get_car_history") as mock:
        mock.return_value = CarHistory(car=car, client_name="John Doe", maintenance=[])
        response = client.get("/api/v1/cars/CAR001/history")

    assert response.status_code == 200
    assert response.json()["client_name"] == "John Doe"


def test_update_car_introuvable(client):
    with patch("app.routers.cars.car_service.update_car", return_value=None):
        response = client.put("/api/v1/cars/NOPE", json={"color": "Red"})
    assert response.status_code == 404


def test_delete_car_avec_maintenance(client):
    with patch("app.routers.cars.car_service.delete_car") as mock:
        mock.side_effect = ValueError("Impossible de supprimer ce véhicule.")
        response = client.delete("/api/v1/cars/CAR001")
    assert response.status_code == 409
