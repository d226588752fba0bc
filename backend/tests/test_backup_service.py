"""
Tests unitaires pour la sauvegarde / restauration :
validation du format, conversion des valeurs et import transactionnel.
"""

import uuid
from datetime import date, datetime
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.models.car import Car
from app.models.client import Client
from app.models.log_entry import LogEntry
from app.models.maintenance import MaintenanceProduct, MaintenanceRequest
from app.schemas.backup import BackupImport
from app.services import backup_service, seed_service


def empty_data(**overrides):
    data = {"clients": [], "cars": [], "services": [], "products": [], "maintenance": []}
    data.update(overrides)
    return data


def added_objects(db):
    objs = [c[0][0] for c in db.add.call_args_list]
    for c in db.add_all.call_args_list:
        objs.extend(c[0][0])
    return objs


# ============================================================
# Format
# ============================================================

def test_backup_collection_manquante():
    data = empty_data()
    del data["maintenance"]
    with pytest.raises(ValidationError) as exc:
        BackupImport(data=data)
    assert "maintenance" in str(exc.value)


def test_backup_collection_non_liste():
    with pytest.raises(ValidationError):
        BackupImport(data=empty_data(clients={"id": "x"}))


# ============================================================
# Conversion
# ============================================================

def test_row_from_dict_convertit_les_types():
    client_id = str(uuid.uuid4())
    car = backup_service._row_from_dict(Car, {
        "uin": "CAR001",
        "license_plate": "ABC123",
        "make": "Toyota",
        "model": "Camry",
        "client_id": client_id,
        "insurance_id": "",
        "created_at": "2024-05-01T10:00:00Z",
        "unknown_column": "ignored",
    })

    assert car.client_id == uuid.UUID(client_id)
    assert car.insurance_id is None
    assert car.created_at.year == 2024
    assert not hasattr(car, "unknown_column")


def test_row_from_dict_date_longue():
    request = backup_service._row_from_dict(MaintenanceRequest, {"start_date": "2024-05-01T00:00:00.000Z"})
    assert request.start_date == date(2024, 5, 1)


# ============================================================
# import_backup
# ============================================================

def test_import_backup_remplace_les_collections_non_vides():
    client_id = uuid.uuid4()
    db = MagicMock()
    db.execute.return_value.scalars.return_value.all.return_value = []
    backup = BackupImport(data=empty_data(clients=[{"id": str(client_id), "name": "John Doe"}]))

    result = backup_service.import_backup(db, backup)

    assert result.success is True
    assert result.imported == {"clients": 1}
    clients = [o for o in added_objects(db) if isinstance(o, Client)]
    assert clients[0].id == client_id
    audit = [o for o in added_objects(db) if isinstance(o, LogEntry)][-1]
    assert audit.table_name == "system"
    db.commit.assert_called_once()


def test_import_backup_recree_les_lignes_de_maintenance():
    request_id = uuid.uuid4()
    product_id = uuid.uuid4()
    db = MagicMock()
    db.execute.return_value.scalars.return_value.all.return_value = []
    backup = BackupImport(data=empty_data(maintenance=[{
        "id": str(request_id),
        "car_uin": "CAR001",
        "client_id": str(uuid.uuid4()),
        "start_date": "2024-05-01",
        "services_used": [],
        "products_used": [{"product_id": str(product_id), "quantity": 2, "stock_source": "shop"}],
    }]))

    backup_service.import_backup(db, backup)

    lines = [o for o in added_objects(db) if isinstance(o, MaintenanceProduct)]
    assert len(lines) == 1
    assert lines[0].maintenance_id == request_id
    assert lines[0].product_id == product_id


def test_import_backup_ignore_les_logs_deja_connus():
    known = uuid.uuid4()
    db = MagicMock()
    db.execute.return_value.scalars.return_value.all.return_value = [known]
    now = datetime(2024, 5, 1, 10, 0).isoformat()
    backup = BackupImport(data=empty_data(logs=[
        {"id": str(known), "action_type": "create", "table_name": "clients", "timestamp": now},
        {"id": str(uuid.uuid4()), "action_type": "update", "table_name": "cars", "timestamp": now},
    ]))

    result = backup_service.import_backup(db, backup)

    assert result.skipped_logs == 1
    assert result.imported["logs"] == 1


def test_import_backup_contrainte_violee():
    db = MagicMock()
    db.execute.return_value.scalars.return_value.all.return_value = []
    db.commit.side_effect = IntegrityError("INSERT", {}, Exception("fk"))
    backup = BackupImport(data=empty_data(cars=[{"uin": "CAR001", "client_id": str(uuid.uuid4())}]))

    with pytest.raises(ValueError) as exc:
        backup_service.import_backup(db, backup)
    assert "incohérente" in str(exc.value)
    db.rollback.assert_called_once()


def test_import_backup_suppression_bloquee_par_une_reference():
    """Erreur levée dès la suppression (avant le commit) : transaction annulée."""
    db = MagicMock()
    db.execute.side_effect = IntegrityError("DELETE", {}, Exception("fk"))
    backup = BackupImport(data=empty_data(clients=[{"id": str(uuid.uuid4()), "name": "Jane"}]))

    with pytest.raises(ValueError):
        backup_service.import_backup(db, backup)
    db.rollback.assert_called_once()
    db.commit.assert_not_called()


def test_import_backup_partiel_laisse_des_vehicules_orphelins(sqlite_db):
    """
    Remplacer les clients sans remplacer les véhicules qui les référencent
    est refusé ; la base reste dans son état d'origine.
    """
    owner = Client(id=uuid.uuid4(), name="John Doe")
    sqlite_db.add(owner)
    sqlite_db.flush()
    sqlite_db.add(Car(uin="CAR001", license_plate="ABC123", make="Toyota", model="Camry", client_id=owner.id))
    sqlite_db.commit()

    backup = BackupImport(data=empty_data(clients=[{"id": str(uuid.uuid4()), "name": "Jane Smith"}]))
    with pytest.raises(ValueError) as exc:
        backup_service.import_backup(sqlite_db, backup)

    assert "incohérente" in str(exc.value)
    assert [c.name for c in sqlite_db.execute(select(Client)).scalars().all()] == ["John Doe"]
    assert sqlite_db.get(Car, "CAR001") is not None


def test_import_backup_clients_et_vehicules_remplaces_ensemble(sqlite_db):
    owner = Client(id=uuid.uuid4(), name="John Doe")
    sqlite_db.add(owner)
    sqlite_db.flush()
    sqlite_db.add(Car(uin="CAR001", license_plate="ABC123", make="Toyota", model="Camry", client_id=owner.id))
    sqlite_db.commit()

    new_owner = str(uuid.uuid4())
    backup = BackupImport(data=empty_data(
        clients=[{"id": new_owner, "name": "Jane Smith"}],
        cars=[{"uin": "CAR009", "license_plate": "XYZ789", "make": "Honda", "model": "Civic", "client_id": new_owner}],
    ))
    result = backup_service.import_backup(sqlite_db, backup)

    assert result.imported == {"clients": 1, "cars": 1}
    assert sqlite_db.get(Car, "CAR001") is None
    assert sqlite_db.get(Car, "CAR009").client_id == uuid.UUID(new_owner)


# ============================================================
# Données de démonstration
# ============================================================

def test_seed_base_deja_remplie():
    db = MagicMock()
    db.execute.return_value.scalar.return_value = uuid.uuid4()

    result = seed_service.seed_database(db)

    assert result.seeded is False
    db.add_all.assert_not_called()
    db.commit.assert_not_called()


def test_seed_base_vide():
    db = MagicMock()
    db.execute.return_value.scalar.return_value = None

    result = seed_service.seed_database(db)

    assert result.seeded is True
    cars = [o for o in added_objects(db) if isinstance(o, Car)]
    assert {c.uin for c in cars} == {"CAR001", "CAR002"}
    db.commit.assert_called_once()
