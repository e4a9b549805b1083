"""Load photo files from disk as compressed payloads."""

from __future__ import annotations

from pathlib import Path

from room_inspection.photos import codec


def load_photo(
    path: Path,
    *,
    max_width: int = codec.MAX_WIDTH,
    quality: int = codec.PHOTO_QUALITY,
) -> str | None:
    """Read and compress one photo; None if the file is not a readable image."""
    if not path.is_file():
        raise FileNotFoundError(f"Photo not found: {path}")
    return codec.compress(path.read_bytes(), max_width=max_width, quality=quality)
