"""
Package expiration thresholds.

Alerts fire only when the days remaining **equal** one of the
thresholds, not when they fall below one.  With thresholds (7, 3, 1) a
package therefore produces at most three alerts in its last week
instead of one every day.
"""

from __future__ import annotations

import datetime
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from app.schemas.expiration import ExpiringPackage, ExpiringPackagesGrouped


class ExpirationConfig(BaseModel):
    thresholds: list[int] = Field(default_factory=lambda: [7, 3, 1])
    dedup_hours: int = Field(24, ge=1)


DEFAULT_CONFIG = ExpirationConfig()


def days_remaining(end_date: datetime.date, today: datetime.date) -> int:
    return (end_date - today).days


def should_alert(remaining: int, thresholds: Iterable[int]) -> bool:
    """Exact match only: 7 alerts, 6 does not."""
    return remaining in set(thresholds)


def is_alertable(package, today: datetime.date, config: Optional[ExpirationConfig] = None) -> bool:
    """Active package with an end date, sessions left and a threshold hit today."""
    if config is None:
        config = DEFAULT_CONFIG
    if package.end_date is None or package.sessions_remaining <= 0:
        return False
    return should_alert(days_remaining(package.end_date, today), config.thresholds)


def to_expiring(package, today: datetime.date) -> ExpiringPackage:
    return ExpiringPackage(package_id=package.id, client_id=package.client_id, package_name=package.name,
                           end_date=package.end_date, days_until_expiry=days_remaining(package.end_date, today),
                           sessions_remaining=package.sessions_remaining, is_shared=package.is_shared, )


def group_by_urgency(expiring: Iterable[ExpiringPackage]) -> ExpiringPackagesGrouped:
    """Bucket into today (<= 1 day), three_days (2-3) and seven_days (4-7)."""
    today, three, seven = [], [], []
    for item in expiring:
        if item.days_until_expiry <= 1:
            today.append(item)
        elif item.days_until_expiry <= 3:
            three.append(item)
        elif item.days_until_expiry <= 7:
            seven.append(item)
    return ExpiringPackagesGrouped(today=today, three_days=three, seven_days=seven)
