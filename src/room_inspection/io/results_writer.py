"""Writers for exported inspection data."""

from __future__ import annotations

from pathlib import Path


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_csv_export(path: Path, text: str) -> Path:
    """Write CSV text as produced by ``to_csv`` (BOM included)."""
    ensure_parent(path)
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(text)
    return path
