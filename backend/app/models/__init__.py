# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# Sans cet import, les FK comme cars.client_id → clients.id échouent
# avec NoReferencedTableError si client.py n'est pas chargé avant car.py.

from app.models.client import Client  # noqa: F401 : doit précéder car
from app.models.insurance import Insurance  # noqa: F401
from app.models.car import Car  # noqa: F401
from app.models.supplier import Supplier  # noqa: F401
from app.models.product import Product  # noqa: F401
from app.models.service import Service  # noqa: F401
from app.models.maintenance import MaintenanceRequest, MaintenanceProduct, MaintenanceService  # noqa: F401
from app.models.employee import Employee, Salary  # noqa: F401
from app.models.finance import FinanceCategory, FinanceRecord  # noqa: F401
from app.models.log_entry import LogEntry  # noqa: F401
