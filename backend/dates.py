# backend/dates.py

"""
Query-string date helpers shared by list and report endpoints.

Dates are YYYY-MM-DD in the server timezone. Ranges are inclusive of both
days: start_date 00:00:00 .. end_date 23:59:59.999999.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from django.utils import timezone


class DateParamError(ValueError):
    pass


def parse_query_date(value: str | None, name: str = "date") -> date | None:
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise DateParamError(f"{name} must be in YYYY-MM-DD format")


def day_start(d: date) -> datetime:
    return timezone.make_aware(datetime.combine(d, time.min), timezone.get_current_timezone())


def day_end(d: date) -> datetime:
    return timezone.make_aware(datetime.combine(d, time.max), timezone.get_current_timezone())


def range_from_params(params, *, default_days: int | None = None):
    """
    Read start_date / end_date (or startDate / endDate) from a QueryDict.

    Returns (start, end) aware datetimes; either may be None. When
    default_days is given and no start_date is supplied, the range starts
    default_days before today.
    """
    start_raw = params.get("start_date") or params.get("startDate")
    end_raw = params.get("end_date") or params.get("endDate")

    start_d = parse_query_date(start_raw, "start_date")
    end_d = parse_query_date(end_raw, "end_date")

    if start_d is None and default_days is not None:
        start_d = timezone.localdate() - timedelta(days=default_days)

    if start_d and end_d and start_d > end_d:
        raise DateParamError("start_date must be on or before end_date")

    start = day_start(start_d) if start_d else None
    end = day_end(end_d) if end_d else None
    return start, end
