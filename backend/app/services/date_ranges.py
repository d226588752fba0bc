"""
Calcul des bornes de période (jour, semaine, mois, année) utilisées par
le journal d'audit, les finances et les rapports.

La semaine commence le dimanche. Une date de fin explicite est incluse
jusqu'à 23:59:59.999999.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from app.schemas.common import VALID_GRANULARITIES


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _check_granularity(granularity: str) -> None:
    if granularity not in VALID_GRANULARITIES:
        raise ValueError(f"Granularité invalide. Valeurs acceptées : {VALID_GRANULARITIES}")


def week_start(day: date) -> date:
    """Dimanche précédant (ou égal à) la date donnée."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def resolve_range(
    start: date | datetime,
    end: Optional[date | datetime] = None,
    granularity: str = "day",
) -> Tuple[datetime, datetime]:
    """
    Retourne l'intervalle [début, fin] couvert par une requête par période.

    - end fourni : [start 00:00, end 23:59:59.999999]
    - sinon la période de `granularity` contenant `start`
    """
    _check_granularity(granularity)
    first = _as_date(start)

    if end is not None:
        last = _as_date(end)
        if last < first:
            raise ValueError("La date de fin doit être postérieure à la date de début.")
        return datetime.combine(first, time.min), datetime.combine(last, time.max)

    if granularity == "day":
        last = first
    elif granularity == "week":
        first = week_start(first)
        last = first + timedelta(days=6)
    elif granularity == "month":
        first = first.replace(day=1)
        next_month = (first.replace(day=28) + timedelta(days=4)).replace(day=1)
        last = next_month - timedelta(days=1)
    else:
        first = first.replace(month=1, day=1)
        last = first.replace(month=12, day=31)

    return datetime.combine(first, time.min), datetime.combine(last, time.max)


def period_key(value: date | datetime, granularity: str) -> str:
    """Clé de regroupement d'une date pour une série temporelle."""
    _check_granularity(granularity)
    day = _as_date(value)

    if granularity == "day":
        return day.isoformat()
    if granularity == "week":
        return week_start(day).isoformat()
    if granularity == "month":
        return day.strftime("%Y-%m")
    return day.strftime("%Y")


def parse_day(value: str) -> date:
    """Parse une date au format YYYY-MM-DD (lève ValueError sinon)."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError("Format de date invalide. Format attendu : YYYY-MM-DD")


def local_day_bounds(day: date, utc_offset_hours: int) -> Tuple[datetime, datetime]:
    """
    Bornes UTC (naïves) d'une journée locale du garage.
    Les horodatages sont stockés en UTC : 00:00 locale = 00:00 - offset UTC.
    """
    offset = timedelta(hours=utc_offset_hours)
    start = datetime.combine(day, time.min) - offset
    end = datetime.combine(day, time.max) - offset
    return start, end
