"""Shared dependencies and utilities."""

from typing import Iterator

from app.config import NotificationSettings
from app.db import CareStore


def get_store() -> Iterator[CareStore]:
    """One data-access handle per request, closed afterwards."""
    store = CareStore.from_env()
    try:
        yield store
    finally:
        store.close()


def get_settings() -> NotificationSettings:
    return NotificationSettings.from_env()
