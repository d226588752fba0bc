"""
Tests unitaires pour les référentiels : assurances, prestations et fournisseurs
(suppressions bloquées par les enregistrements dépendants).
"""

import uuid
from unittest.mock import MagicMock

import pytest

from app.models.insurance import Insurance
from app.models.service import Service
from app.models.supplier import Supplier
from app.schemas.service import ServiceCreate, ServiceUpdate
from app.services import catalog_service, insurance_service, supplier_service


def make_db(obj=None, dependent=None):
    db = MagicMock()
    db.get.return_value = obj
    db.execute.return_value.scalar.return_value = dependent
    return db


# ============================================================
# Assurances
# ============================================================

def test_delete_insurance_rattachee_a_un_vehicule():
    insurance = Insurance(id=uuid.uuid4(), name="SafeDrive Insurance")
    db = make_db(insurance, dependent="CAR001")
    with pytest.raises(ValueError):
        insurance_service.delete_insurance(db, insurance.id)
    db.delete.assert_not_called()


def test_delete_insurance_introuvable():
    assert insurance_service.delete_insurance(make_db(), uuid.uuid4()) is False


# ============================================================
# Prestations
# ============================================================

def test_create_service_journalise():
    db = make_db()
    service = catalog_service.create_service(db, ServiceCreate(name="Oil Change", standard_fee=50))

    assert service.name == "Oil Change"
    log = db.add.call_args[0][0]
    assert log.action_type == "create"
    assert log.table_name == "services"
    db.commit.assert_called_once()


def test_update_service_tarif():
    service = Service(id=uuid.uuid4(), name="Oil Change", standard_fee=50.0)
    catalog_service.update_service(make_db(service), service.id, ServiceUpdate(standard_fee=65))
    assert service.standard_fee == 65


def test_delete_service_utilise():
    service = Service(id=uuid.uuid4(), name="Oil Change", standard_fee=50.0)
    db = make_db(service, dependent=3)
    with pytest.raises(ValueError) as exc:
        catalog_service.delete_service(db, service.id)
    assert "utilisée" in str(exc.value)


def test_service_tarif_negatif_rejete():
    with pytest.raises(ValueError):
        ServiceCreate(name="Oil Change", standard_fee=-1)


# ============================================================
# Fournisseurs
# ============================================================

def test_delete_supplier_avec_produits():
    supplier = Supplier(id=uuid.uuid4(), name="AutoParts Inc.")
    db = make_db(supplier, dependent=uuid.uuid4())
    with pytest.raises(ValueError):
        supplier_service.delete_supplier(db, supplier.id)
    db.delete.assert_not_called()


def test_delete_supplier_ok():
    supplier = Supplier(id=uuid.uuid4(), name="AutoParts Inc.")
    db = make_db(supplier)
    assert supplier_service.delete_supplier(db, supplier.id) is True
    db.delete.assert_called_once_with(supplier)


def test_get_supplier_with_products_introuvable():
    assert supplier_service.get_supplier_with_products(make_db(), uuid.uuid4()) is None
