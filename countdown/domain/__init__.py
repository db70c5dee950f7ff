"""Domain models and DTOs."""

from countdown.domain.app_data import AppData
from countdown.domain.excluded_date import ExcludedDate
from countdown.domain.migration import CURRENT_SCHEMA_VERSION, migrate_app_data
from countdown.domain.task import Task


__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "AppData",
    "ExcludedDate",
    "Task",
    "migrate_app_data",
]
