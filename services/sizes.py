from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Mapping


def format_megabytes(size: float) -> str:
    return f"{size / (1024 * 1024):,.2f} MB"


def directory_size(path: Path) -> int:
    """Sum of file sizes below ``path``; symlinks are not followed."""
    total = 0
    if not path.is_dir():
        return 0
    for root, _dirs, files in os.walk(path, followlinks=False):
        for name in files:
            p = Path(root) / name
            try:
                if not p.is_symlink():
                    total += p.stat().st_size
            except OSError:
                # file vanished while walking
                continue
    return total


def database_size(table_rows: Iterable[Mapping]) -> int:
    return sum(int(r.get("Data_length") or 0) + int(r.get("Index_length") or 0) for r in table_rows)
