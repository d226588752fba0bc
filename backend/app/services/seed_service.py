"""
Jeu de données de démonstration, inséré uniquement si la base ne contient aucun client.
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.car import Car
from app.models.client import Client
from app.models.insurance import Insurance
from app.models.product import Product
from app.models.service import Service
from app.models.supplier import Supplier
from app.schemas.backup import SeedResult
from app.services import log_service

logger = logging.getLogger(__name__)


def seed_database(db: Session) -> SeedResult:
    if db.execute(select(Client.id).limit(1)).scalar():
        return SeedResult(seeded=False, message="La base contient déjà des données.")

    client1 = Client(name="John Doe", contact="555-123-4567", email="john@example.com",
                     address="123 Main St, Anytown, CA 12345")
    client2 = Client(name="Jane Smith", contact="555-987-6543", email="jane@example.com",
                     address="456 Oak Ave, Somewhere, CA 67890")
    insurance = Insurance(name="ABC Insurance", contact_person="Bob Johnson", email="bob@abcinsurance.com",
                          phone="555-111-2222", address="789 Insurance Blvd, Insure City, CA 54321")
    supplier = Supplier(name="Auto Parts Plus", contact="Sarah Lee", email="sarah@autopartsplus.com",
                        phone="555-333-4444", address="101 Parts Lane, Partsville, CA 11111")
    db.add_all([client1, client2, insurance, supplier])
    db.flush()

    records = [
        Car(uin="CAR001", license_plate="ABC123", make="Toyota", model="Camry", year=2020,
            vin="1HGCM82633A123456", color="Blue", client_id=client1.id, insurance_id=insurance.id),
        Car(uin="CAR002", license_plate="XYZ789", make="Honda", model="Accord", year=2019,
            vin="5YJSA1E29JF123456", color="Red", client_id=client2.id),
        Service(name="Oil Change", description="Standard oil change service with filter replacement",
                standard_fee=49.99),
        Service(name="Brake Inspection", description="Complete brake system inspection and adjustment",
                standard_fee=79.99),
        Product(name="Oil Filter", description="Premium oil filter for most vehicles",
                purchase_price=7.50, sale_price=12.99, warehouse_stock=50, shop_stock=10,
                supplier_id=supplier.id, low_stock_threshold=15),
        Product(name="Brake Pads", description="High-performance ceramic brake pads",
                purchase_price=24.00, sale_price=39.99, warehouse_stock=30, shop_stock=8,
                supplier_id=supplier.id, low_stock_threshold=10),
    ]
    db.add_all(records)

    log_service.record(db, "create", "system", after={"message": f"Données de démonstration insérées le {date.today()}"})
    db.commit()

    logger.info("Base initialisée avec les données de démonstration")
    return SeedResult(seeded=True, message="Données de démonstration insérées.")
