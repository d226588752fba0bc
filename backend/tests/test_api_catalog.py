"""
Tests d'intégration API pour les référentiels : assurances, prestations, fournisseurs.
"""

import uuid
from datetime import datetime
from unittest.mock import patch

from app.schemas.service import ServiceResponse
from app.schemas.supplier import SupplierResponse, SupplierWithProducts


def make_service_response(**kwargs) -> ServiceResponse:
    return ServiceResponse(
        id=uuid.uuid4(),
        name=kwargs.get("name", "Oil Change"),
        description=None,
        standard_fee=kwargs.get("standard_fee", 50.0),
        created_at=datetime.now(),
        updated_at=datetime.now(),
    )


# ============================================================
# /api/v1/services
# ============================================================

def test_create_service_succes(client):
    with patch("app.routers.services.catalog_service.create_service") as mock:
        mock.return_value = make_service_response()
        response = client.post("/api/v1/services", json={"name": "Oil Change", "standard_fee": 50})
    assert response.status_code == 201
    assert response.json()["standard_fee"] == 50.0


def test_create_service_tarif_manquant(client):
    response = client.post("/api/v1/services", json={"name": "Oil Change"})
    assert response.status_code == 422


def test_delete_service_utilise(client):
    with patch("app.routers.services.catalog_service.delete_service") as mock:
        mock.side_effect = ValueError("Impossible de supprimer cette prestation.")
        response = client.delete(f"/api/v1/services/{uuid.uuid4()}")
    assert response.status_code == 409


# ============================================================
# /api/v1/insurance
# ============================================================

def test_get_insurance_introuvable(client):
    with patch("app.routers.insurance.insurance_service.get_insurance", return_value=None):
        response = client.get(f"/api/v1/insurance/{uuid.uuid4()}")
    assert response.status_code == 404


def test_delete_insurance_rattachee(client):
    with patch("app.routers.insurance.insurance_service.delete_insurance") as mock:
        mock.side_effect = ValueError("Impossible de supprimer cette assurance.")
        response = client.delete(f"/api/v1/insurance/{uuid.uuid4()}")
    assert response.status_code == 409


# ============================================================
# /api/v1/suppliers
# ============================================================

def test_supplier_avec_produits(client):
    supplier = SupplierResponse(
        id=uuid.uuid4(), name="AutoParts Inc.", contact="Mike Johnson", address=None,
        phone=None, email=None, created_at=datetime.now(), updated_at=datetime.now(),
    )
    with patch("app.routers.suppliers.supplier_service.get_supplier_with_products") as mock:
        mock.return_value = SupplierWithProducts(supplier=supplier, products=[])
        response = client.get(f"/api/v1/suppliers/{supplier.id}/products")
    assert response.status_code == 200
    assert response.json()["supplier"]["name"] == "AutoParts Inc."


def test_create_supplier_email_invalide(client):
    response = client.post("/api/v1/suppliers", json={"name": "AutoParts", "email": "invalide"})
    assert response.status_code == 422
