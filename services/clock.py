"""Calendar helpers. Every "today" in the engine is the UTC calendar date."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from flask import current_app, has_app_context

from domain.errors import ValidationError


def today() -> date:
    if has_app_context():
        pinned = current_app.config.get("TODAY")
        if pinned:
            return parse_date(pinned)
    return datetime.now(timezone.utc).date()


def parse_date(value: Any, *, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)")
    text = value.strip()
    # tolerate timestamps such as "2024-01-01 00:00:00" or "2024-01-01T00:00:00Z"
    if len(text) > 10 and text[10] in (" ", "T"):
        text = text[:10]
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD), got {value!r}") from exc


def resolve_today(value: date | None) -> date:
    return value if value is not None else today()
