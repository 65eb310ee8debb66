"""
Data Ingestion Module
"""
from .batch_loader import (
    BatchLoader,
    FileFormat,
    LoadResult,
    SourceFileConfig,
    SourceLoadError,
    SourceTables,
    normalize_table,
)

__all__ = [
    "BatchLoader",
    "FileFormat",
    "LoadResult",
    "SourceFileConfig",
    "SourceLoadError",
    "SourceTables",
    "normalize_table",
]
