"""
Batch Source Loader

Loads the visit, calendar and store tables from CSV, JSON Lines or Parquet
files and normalizes them to the canonical schemas.
Supports:
- Original dataset column names (renamed on load)
- Type coercion of timestamps, dates, flags and coordinates
- Audit metadata (row counts, file hash, timings)
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import hashlib

import polars as pl
import structlog
from pydantic import BaseModel

from restaurant_analytics.schema import (
    SOURCE_COLUMN_ALIASES,
    TABLE_SCHEMAS,
    SourceTable,
)

logger = structlog.get_logger(__name__)


class FileFormat(str, Enum):
    """Supported file formats"""
    CSV = "csv"
    JSONL = "jsonl"
    PARQUET = "parquet"


class LoadStatus(str, Enum):
    """Batch load status"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class SourceFileConfig:
    """Configuration for loading one source table"""
    file_path: Union[str, Path]
    table: SourceTable
    file_format: FileFormat = FileFormat.CSV
    delimiter: str = ","
    encoding: str = "utf8"
    datetime_format: str = "%Y-%m-%d %H:%M:%S"
    null_values: List[str] = field(default_factory=lambda: ["", "NULL", "null", "None", "NA", "N/A"])


class LoadResult(BaseModel):
    """Result of a source load operation"""
    file_path: str
    table: SourceTable
    status: LoadStatus
    rows_loaded: int = 0
    error_message: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None
    file_hash: Optional[str] = None


class SourceLoadError(RuntimeError):
    """Raised when a source table cannot be read or normalized"""

    def __init__(self, table: SourceTable, message: str, result: Optional[LoadResult] = None):
        self.table = table
        self.result = result
        super().__init__(f"{table.value}: {message}")


@dataclass
class SourceTables:
    """The three normalized source tables"""
    visits: pl.DataFrame
    calendar: pl.DataFrame
    stores: pl.DataFrame
    load_results: List[LoadResult] = field(default_factory=list)


class BatchLoader:
    """
    Source table loader.

    Example:
        loader = BatchLoader()
        config = SourceFileConfig(
            file_path="data/raw/restaurants_visitors.csv",
            table=SourceTable.VISITS,
        )
        df, result = loader.load(config)
    """

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file for audit"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def _read_csv(self, config: SourceFileConfig) -> pl.DataFrame:
        """Read CSV file, leaving every column as text for explicit coercion"""
        return pl.read_csv(
            config.file_path,
            separator=config.delimiter,
            encoding=config.encoding,
            null_values=config.null_values,
            infer_schema=False,
        )

    def _read_jsonl(self, config: SourceFileConfig) -> pl.DataFrame:
        """Read JSON Lines (NDJSON) file"""
        return pl.read_ndjson(config.file_path)

    def _read_parquet(self, config: SourceFileConfig) -> pl.DataFrame:
        """Read Parquet file"""
        return pl.read_parquet(config.file_path)

    def _read_file(self, config: SourceFileConfig) -> pl.DataFrame:
        """Read file based on format"""
        readers = {
            FileFormat.CSV: self._read_csv,
            FileFormat.JSONL: self._read_jsonl,
            FileFormat.PARQUET: self._read_parquet,
        }
        reader = readers.get(config.file_format)
        if not reader:
            raise ValueError(f"Unsupported file format: {config.file_format}")
        return reader(config)

    def load(self, config: SourceFileConfig) -> Tuple[pl.DataFrame, LoadResult]:
        """
        Load and normalize one source table.

        Args:
            config: Source file configuration

        Returns:
            Normalized DataFrame and the LoadResult audit record

        Raises:
            SourceLoadError: file missing, unreadable or lacking required columns;
                the failed LoadResult is attached as ``result``
        """
        file_path = Path(config.file_path)
        started_at = datetime.utcnow()

        result = LoadResult(
            file_path=str(file_path),
            table=config.table,
            status=LoadStatus.RUNNING,
            started_at=started_at,
        )

        logger.info(
            "Starting source load",
            file=str(file_path),
            table=config.table.value,
        )

        try:
            if not file_path.exists():
                raise FileNotFoundError(f"File not found: {file_path}")

            result.file_hash = self._compute_file_hash(file_path)
            raw = self._read_file(config)
            df = normalize_table(raw, config.table, datetime_format=config.datetime_format)
        except Exception as e:
            result.status = LoadStatus.FAILED
            result.error_message = str(e)
            result.completed_at = datetime.utcnow()
            result.load_duration_seconds = (
                result.completed_at - started_at
            ).total_seconds()

            logger.error(
                "Source load failed",
                error=str(e),
                file=str(file_path),
                table=config.table.value,
            )
            raise SourceLoadError(config.table, str(e), result=result) from e

        result.status = LoadStatus.COMPLETED
        result.rows_loaded = len(df)
        result.completed_at = datetime.utcnow()
        result.load_duration_seconds = (
            result.completed_at - started_at
        ).total_seconds()

        logger.info(
            "Source load completed",
            table=config.table.value,
            rows_loaded=result.rows_loaded,
            duration_seconds=result.load_duration_seconds,
        )

        return df, result

    def load_sources(
        self,
        visits_path: Union[str, Path],
        calendar_path: Union[str, Path],
        stores_path: Union[str, Path],
        file_format: FileFormat = FileFormat.CSV,
        **kwargs,
    ) -> SourceTables:
        """
        Load all three source tables.

        Args:
            visits_path: Visit/reservation records file
            calendar_path: Calendar dimension file
            stores_path: Store dimension file
            file_format: Format shared by the three files
            **kwargs: Additional SourceFileConfig parameters

        Returns:
            SourceTables with the normalized frames and their load results
        """
        paths = {
            SourceTable.VISITS: visits_path,
            SourceTable.CALENDAR: calendar_path,
            SourceTable.STORES: stores_path,
        }

        frames: Dict[SourceTable, pl.DataFrame] = {}
        results = []
        for table, path in paths.items():
            config = SourceFileConfig(
                file_path=path,
                table=table,
                file_format=file_format,
                **kwargs,
            )
            frames[table], result = self.load(config)
            results.append(result)

        return SourceTables(
            visits=frames[SourceTable.VISITS],
            calendar=frames[SourceTable.CALENDAR],
            stores=frames[SourceTable.STORES],
            load_results=results,
        )


def _coerce_column(
    df: pl.DataFrame,
    column: str,
    dtype: pl.DataType,
    datetime_format: str,
) -> pl.Expr:
    """Build the expression casting a raw column to its canonical dtype"""
    actual = df.schema[column]
    col = pl.col(column)

    if isinstance(dtype, pl.Datetime):
        if actual == pl.String:
            return col.str.strip_chars().str.strptime(pl.Datetime("us"), datetime_format, strict=False)
        return col.cast(pl.Datetime("us"), strict=False)

    if dtype == pl.Date:
        if actual == pl.String:
            return col.str.strip_chars().str.to_date("%Y-%m-%d", strict=False)
        if isinstance(actual, pl.Datetime):
            return col.dt.date()
        return col.cast(pl.Date, strict=False)

    if dtype == pl.Boolean:
        # Flags arrive as 0/1 integers or their text form
        if actual == pl.String:
            return col.str.strip_chars().cast(pl.Int8, strict=False).cast(pl.Boolean)
        return col.cast(pl.Int8, strict=False).cast(pl.Boolean)

    if isinstance(dtype, pl.Decimal) and actual == pl.String:
        return col.str.strip_chars().cast(dtype, strict=False)

    if dtype == pl.Int64 and actual == pl.String:
        return col.str.strip_chars().cast(pl.Int64, strict=False)

    return col.cast(dtype, strict=False)


def normalize_table(
    df: pl.DataFrame,
    table: SourceTable,
    datetime_format: str = "%Y-%m-%d %H:%M:%S",
) -> pl.DataFrame:
    """
    Rename source columns and coerce them to the canonical schema.

    Values that cannot be parsed become nulls so they are counted by the
    data quality stage rather than failing the load. Columns outside the
    canonical schema are dropped.

    Raises:
        ValueError: a required canonical column is absent
    """
    aliases = {
        source: canonical
        for source, canonical in SOURCE_COLUMN_ALIASES[table].items()
        if source in df.columns and canonical not in df.columns
    }
    df = df.rename(aliases)

    schema = TABLE_SCHEMAS[table]
    missing = [column for column in schema if column not in df.columns]
    if missing:
        raise ValueError(f"Missing columns: {missing}")

    return df.select([
        _coerce_column(df, column, dtype, datetime_format).alias(column)
        for column, dtype in schema.items()
    ])
