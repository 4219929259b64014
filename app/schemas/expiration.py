"""
Package expiration schemas.
"""

import datetime

from pydantic import BaseModel


class ExpiringPackage(BaseModel):
    package_id: int
    client_id: int
    package_name: str
    end_date: datetime.date
    days_until_expiry: int
    sessions_remaining: int
    is_shared: bool


class ExpiringPackagesGrouped(BaseModel):
    today: list[ExpiringPackage]
    three_days: list[ExpiringPackage]
    seven_days: list[ExpiringPackage]


class ExpirationRunResult(BaseModel):
    checked: int
    alerted: int
