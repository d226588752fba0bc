"""
Schémas Pydantic de la file d'écritures offline côté poste de travail.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

WRITE_METHODS = {"POST", "PUT", "DELETE", "PATCH"}
HTTP_METHODS = WRITE_METHODS | {"GET"}


class QueuedOperation(BaseModel):
    """Requête HTTP mise en attente pendant une coupure réseau."""

    id: str
    timestamp: datetime
    method: str
    url: str
    payload: Optional[Any] = None
    retry_count: int = 0

    model_config = {"from_attributes": True}

    @field_validator("method")
    @classmethod
    def valid_method(cls, v: str) -> str:
        v = v.upper()
        if v not in HTTP_METHODS:
            raise ValueError(f"Méthode HTTP invalide. Valeurs acceptées : {HTTP_METHODS}")
        return v


class SyncResult(BaseModel):
    """Bilan d'une passe de synchronisation."""

    success: bool
    synced_count: int = 0
    failed_count: int = 0


class ApiResult(BaseModel):
    """
    Résultat d'un appel API côté poste de travail.
    offline=True : la requête n'a pas atteint le serveur (erreur, ou écriture mise en file).
    """

    data: Optional[Any] = None
    error: Optional[str] = None
    offline: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None
