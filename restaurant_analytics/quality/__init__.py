"""
Data Quality Module
"""
from .validators import (
    DataValidator,
    ValidationResult,
    ValidationSeverity,
    ValidationStatus,
    create_calendar_validator,
    create_stores_validator,
    create_visits_validator,
    profile_nulls,
)

__all__ = [
    "DataValidator",
    "ValidationResult",
    "ValidationSeverity",
    "ValidationStatus",
    "create_calendar_validator",
    "create_stores_validator",
    "create_visits_validator",
    "profile_nulls",
]
