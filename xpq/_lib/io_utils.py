from __future__ import annotations

from pathlib import Path
from typing import List


def ensure_dir(path: Path) -> None:
    """
    Ensure a directory exists.
    """
    path.mkdir(parents=True, exist_ok=True)


def list_parquet_files(path: Path) -> List[Path]:
    """
    Resolve a source path into the parquet files it covers.

    A file is returned as is, whatever its name. A directory is walked
    recursively (partition directories included) and only ``*.parquet`` files
    are kept, so markers like ``_SUCCESS`` or ``.crc`` files are skipped.
    """
    path = Path(path)
    if path.is_file():
        return [path]
    if not path.exists():
        return []
    return sorted(p for p in path.rglob("*.parquet") if p.is_file())
