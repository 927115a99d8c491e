"""Inspect parquet files: schema, row counts, rows, samples and value frequencies."""

__version__ = "0.1.0"

from xpq.errors import (  # noqa: E402
    AssemblyError,
    ConfigError,
    FormatError,
    InvalidColumnError,
    InvalidSampleSizeError,
    MetadataError,
    XpqError,
)
from xpq.reader import ParquetSource  # noqa: E402

__all__ = [
    "AssemblyError",
    "ConfigError",
    "FormatError",
    "InvalidColumnError",
    "InvalidSampleSizeError",
    "MetadataError",
    "ParquetSource",
    "XpqError",
    "__version__",
]
