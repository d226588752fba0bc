"""
Schémas Pydantic des vues détaillées (fiche client, fiche véhicule).
"""

from typing import List

from pydantic import BaseModel

from app.schemas.car import CarResponse
from app.schemas.client import ClientResponse
from app.schemas.maintenance import MaintenanceDetail


class ClientWithCars(BaseModel):
    client: ClientResponse
    cars: List[CarResponse]


class ClientWithRequests(BaseModel):
    client: ClientResponse
    cars: List[CarResponse]
    maintenance: List[MaintenanceDetail]


class CarHistory(BaseModel):
    car: CarResponse
    client_name: str
    maintenance: List[MaintenanceDetail]
