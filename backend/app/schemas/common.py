"""
Schémas Pydantic partagés entre plusieurs modules.
"""

from typing import Optional

from pydantic import BaseModel, field_validator

VALID_GRANULARITIES = {"day", "week", "month", "year"}


class FieldUpdate(BaseModel):
    """Modification d'un seul champ depuis une cellule éditable du tableau."""
    field: str
    value: Optional[str | int | float | bool] = None

    @field_validator("field")
    @classmethod
    def field_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom du champ ne peut pas être vide.")
        return v.strip()


def not_blank(v: Optional[str], label: str = "Le champ") -> Optional[str]:
    """Refuse une chaîne vide ou composée d'espaces, sinon la retourne nettoyée."""
    if v is None:
        return v
    if not v.strip():
        raise ValueError(f"{label} ne peut pas être vide.")
    return v.strip()
