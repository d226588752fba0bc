"""
Schémas Pydantic des rapports : tableau de bord analytique et rapport journalier.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel

from app.schemas.car import CarReportRow
from app.schemas.maintenance import MaintenanceDetail

VALID_ANALYTICS_PERIODS = {"week", "month", "year"}


class StatusDistribution(BaseModel):
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0


class MaintenanceAnalytics(BaseModel):
    total: int
    total_revenue: float
    paid_revenue: float
    outstanding_revenue: float
    status_distribution: StatusDistribution


class InventoryAnalytics(BaseModel):
    total_products: int
    low_stock_products: int
    total_warehouse_stock: int
    total_shop_stock: int


class ClientAnalytics(BaseModel):
    total: int
    cars: int
    cars_per_client: float


class SystemAnalytics(BaseModel):
    period: str
    start: datetime
    end: datetime
    maintenance: MaintenanceAnalytics
    inventory: InventoryAnalytics
    clients: ClientAnalytics


class ServiceUsageRow(BaseModel):
    service_id: uuid.UUID
    service_name: str
    quantity: int
    unit_price: float
    total_cost: float
    maintenance_id: uuid.UUID
    client_id: uuid.UUID
    client_name: str
    car_uin: str
    car_details: str
    timestamp: Optional[datetime]


class ProductUsageRow(BaseModel):
    product_id: uuid.UUID
    product_name: str
    quantity: int
    unit_price: float
    total_cost: float
    stock_source: str
    maintenance_id: uuid.UUID
    client_id: uuid.UUID
    client_name: str
    car_uin: str
    car_details: str
    timestamp: Optional[datetime]


class PaymentRow(BaseModel):
    maintenance_id: Optional[str]
    amount: float
    remaining_balance: Optional[float]
    client_id: Optional[str]
    client_name: str
    car_uin: Optional[str]
    car_details: str
    timestamp: datetime


class DailyReport(BaseModel):
    date: date
    new_cars: List[CarReportRow]
    services: List[ServiceUsageRow]
    products: List[ProductUsageRow]
    payments: List[PaymentRow]
    total_payments: float
    maintenance: List[MaintenanceDetail]
