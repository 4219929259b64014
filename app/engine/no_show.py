"""
No-show statistics over a client's most recent concluded sessions.
"""

from __future__ import annotations

from typing import Optional, Sequence

from pydantic import BaseModel, Field

from app.models.booking import BookingStatus
from app.models.no_show_alert import NoShowSeverity
from app.schemas.no_show import NoShowStats


class NoShowConfig(BaseModel):
    sessions_to_analyze: int = Field(5, ge=1)
    alert_threshold: float = Field(40.0, ge=0.0, le=100.0)
    high_threshold: float = Field(50.0, ge=0.0, le=100.0)
    critical_threshold: float = Field(60.0, ge=0.0, le=100.0)


DEFAULT_CONFIG = NoShowConfig()


def severity_for_rate(rate: float, config: Optional[NoShowConfig] = None) -> NoShowSeverity:
    if config is None:
        config = DEFAULT_CONFIG
    if rate >= config.critical_threshold:
        return NoShowSeverity.critical
    if rate >= config.high_threshold:
        return NoShowSeverity.high
    return NoShowSeverity.warning


def compute_no_show_stats(client_id: int, recent: Sequence, config: Optional[NoShowConfig] = None) -> NoShowStats:
    """Stats over ``recent`` (completed / no-show bookings, newest first)."""
    if config is None:
        config = DEFAULT_CONFIG

    analysed = list(recent)[:config.sessions_to_analyze]
    missed = sum(1 for b in analysed if b.status == BookingStatus.no_show)
    rate = round(missed / len(analysed) * 100, 1) if analysed else 0.0
    exceeds = bool(analysed) and rate >= config.alert_threshold

    return NoShowStats(client_id=client_id, no_show_count=missed, session_count=len(analysed), no_show_rate=rate,
                       exceeds_threshold=exceeds, severity=severity_for_rate(rate, config) if exceeds else None, )
