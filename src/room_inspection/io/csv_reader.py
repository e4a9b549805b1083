"""CSV reader for staff name lists."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable


def read_staff_names(csv_path: Path, name_column: str = "name") -> Iterable[str]:
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV not found: {csv_path}")

    # utf-8-sig tolerates the BOM spreadsheet tools put in front of exports.
    with csv_path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames or name_column not in reader.fieldnames:
            raise ValueError(f"CSV must include '{name_column}' column")

        for row in reader:
            value = (row.get(name_column) or "").strip()
            if value:
                yield value
