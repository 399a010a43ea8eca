"""Shared utilities: UTC datetimes and id generation."""

from app.shared.utils.datetime import (
    end_of_day_utc,
    ensure_utc,
    start_of_day_utc,
    utc_now,
)
from app.shared.utils.generators import generate_cuid

__all__ = [
    "end_of_day_utc",
    "ensure_utc",
    "generate_cuid",
    "start_of_day_utc",
    "utc_now",
]
