"""
Aggregation over already-fetched inspection records.

Everything here is pure: the reference time and the window/threshold
configuration are passed in, nothing reads the clock or global settings.
"""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, model_validator

from leaktrack.core.settings import AppSettings
from leaktrack.db.models.inspection import SEVERITY_NONE, STATUS_COMPLETED, STATUS_PENDING
from leaktrack.schemas.stats import (
    InspectionSummary,
    LeakageFreeCounts,
    LeakageFrequency,
    StatusCounts,
)


class SummaryConfig(BaseModel):
    """Windows and thresholds used by summarize_inspections."""
    delay_threshold_hours: int = Field(48, ge=1)
    week_days: int = Field(7, ge=1)
    month_days: int = Field(30, ge=1)
    top_n: int = Field(10, ge=1)
    timezone: str = Field("UTC", description="IANA zone for the start of 'today'")

    @model_validator(mode="after")
    def _windows_nested(self) -> "SummaryConfig":
        if self.week_days > self.month_days:
            raise ValueError("week_days must not exceed month_days")
        return self

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "SummaryConfig":
        return cls(
            delay_threshold_hours=settings.DELAY_THRESHOLD_HOURS,
            week_days=settings.LEAKAGE_FREE_WEEK_DAYS,
            month_days=settings.LEAKAGE_FREE_MONTH_DAYS,
            top_n=settings.TOP_LEAKAGES_LIMIT,
            timezone=settings.REPORT_TIMEZONE,
        )


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite hands them back without tzinfo)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def start_of_day(now: datetime, tz_name: str) -> datetime:
    """Local midnight of the day containing `now`, in the given zone."""
    local = as_utc(now).astimezone(ZoneInfo(tz_name))
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


# PUBLIC_INTERFACE
def is_delayed(record: Any, now: datetime, threshold_hours: int) -> bool:
    """
    True when the record is still Pending and older than the threshold.

    Delay is never stored; it has to be recomputed whenever `now` moves.
    """
    if record.status != STATUS_PENDING:
        return False
    return as_utc(now) - as_utc(record.created_at) > timedelta(hours=threshold_hours)


def _count_in_window(records: Iterable[Any], start: datetime, now: datetime) -> int:
    return sum(
        1
        for r in records
        if r.severity == SEVERITY_NONE and start <= as_utc(r.created_at) < now
    )


def top_leakages(records: Sequence[Any], limit: int) -> list[LeakageFrequency]:
    """
    Count records per leakage type, most frequent first.

    Records without a leakage type are skipped. Ties keep first-seen order
    because Counter preserves insertion order and sorted() is stable.
    """
    counts: Counter = Counter()
    labels: dict = {}
    for r in records:
        key = r.leakage_type_id
        if key is None:
            continue
        counts[key] += 1
        if key not in labels:
            labels[key] = getattr(r, "leakage_type", None)

    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit]
    result = []
    for key, count in ranked:
        lt = labels.get(key)
        result.append(
            LeakageFrequency(
                leakage_type_id=key,
                code=getattr(lt, "code", None),
                name=getattr(lt, "name", None),
                count=count,
            )
        )
    return result


# PUBLIC_INTERFACE
def summarize_inspections(
    records: Sequence[Any],
    now: datetime,
    config: Optional[SummaryConfig] = None,
) -> InspectionSummary:
    """
    Derive dashboard counts from a finite list of inspection records.

    Parameters:
        records: objects exposing status, severity, created_at, leakage_type_id
                 and optionally a loaded leakage_type (code/name)
        now: reference time; naive values are read as UTC
        config: windows and thresholds, defaults to SummaryConfig()
    Returns:
        InspectionSummary with status, leakage-free, delayed and top-N counts.
    """
    config = config or SummaryConfig()
    now = as_utc(now)
    records = list(records)

    today_start = start_of_day(now, config.timezone)
    week_start = now - timedelta(days=config.week_days)
    month_start = now - timedelta(days=config.month_days)

    return InspectionSummary(
        total=len(records),
        status_counts=StatusCounts(
            pending=sum(1 for r in records if r.status == STATUS_PENDING),
            completed=sum(1 for r in records if r.status == STATUS_COMPLETED),
        ),
        leakage_free_counts=LeakageFreeCounts(
            today=_count_in_window(records, today_start, now),
            week=_count_in_window(records, week_start, now),
            month=_count_in_window(records, month_start, now),
        ),
        delayed_count=sum(
            1 for r in records if is_delayed(r, now, config.delay_threshold_hours)
        ),
        top_leakages=top_leakages(records, config.top_n),
    )
