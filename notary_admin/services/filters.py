"""
Filtres des écrans de liste : recherche, statut, période et pagination.
"""
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel

from notary_admin.exceptions import ValidationError

PERIODS = ("all", "today", "week", "month")


class Page(BaseModel):
    items: List[Dict[str, Any]]
    total: int
    page: int
    per_page: int
    total_pages: int


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Date ISO 8601 ou timestamp Unix en secondes -> datetime UTC"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def period_start(period: str, now: datetime) -> Optional[datetime]:
    if period == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now - relativedelta(months=1)
    return None


def filter_rows(
    rows: Iterable[Dict[str, Any]],
    search: Optional[str] = None,
    search_fields: Sequence[str] = (),
    status: Optional[str] = None,
    status_field: str = "status",
    date_field: Optional[str] = None,
    period: str = "all",
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    if period not in PERIODS:
        raise ValidationError(f"Période invalide : {period}", "period")
    filtered = [row for row in rows if row]

    if status and status != "all":
        filtered = [row for row in filtered if row.get(status_field) == status]

    if search:
        needle = search.lower()
        filtered = [
            row
            for row in filtered
            if any(needle in str(row.get(name) or "").lower() for name in search_fields)
        ]

    if date_field and period != "all":
        start = period_start(period, now or datetime.now(timezone.utc))
        kept = []
        for row in filtered:
            created = parse_timestamp(row.get(date_field))
            if created is not None and created >= start:
                kept.append(row)
        filtered = kept

    return filtered


def paginate(rows: Sequence[Dict[str, Any]], page: int = 1, per_page: int = 10) -> Page:
    if per_page < 1:
        raise ValidationError("per_page doit être positif", "per_page")
    total = len(rows)
    total_pages = max(1, math.ceil(total / per_page))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return Page(
        items=list(rows[start:start + per_page]),
        total=total,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
    )
