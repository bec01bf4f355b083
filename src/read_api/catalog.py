from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from src.transforms.timezones import TimezoneRecord
from src.utils.config import load_catalog_config
from src.utils.logging import get_logger


logger = get_logger(component="read_api_catalog")

_CATALOG_ADAPTER = TypeAdapter(tuple[TimezoneRecord, ...])


class CatalogLoadError(Exception):
    pass


def load_catalog(path: Path) -> tuple[TimezoneRecord, ...]:
    """Parse and validate a catalog artifact; order is kept as written."""
    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError as e:
        raise CatalogLoadError(f"Catalog artifact not found: {path} (run scripts/build_timezones.py)") from e
    try:
        records = _CATALOG_ADAPTER.validate_json(raw)
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid catalog artifact {path}: {e.error_count()} validation error(s)") from e
    logger.info("catalog_loaded", path=str(path), records=len(records))
    return records


@lru_cache(maxsize=1)
def get_catalog() -> tuple[TimezoneRecord, ...]:
    """Process-wide catalog, loaded on first use and shared read-only afterwards."""
    return load_catalog(load_catalog_config().artifact_path)


def searchable_text(record: TimezoneRecord) -> str:
    # Absent fields are dropped rather than left as placeholders, so neighbours join directly.
    parts = [record.id, record.country_code, record.country_name, record.city, *record.abbreviations]
    return " ".join(p for p in parts if p).lower()


def parse_terms(query: str | None) -> list[str]:
    return (query or "").strip().lower().split()


def search(records: Iterable[TimezoneRecord], query: str | None) -> list[TimezoneRecord]:
    """
    All records whose searchable text contains every query term.

    Empty or missing query returns everything. Relative order is preserved.
    """
    items = list(records)
    if not query:
        return items
    terms = parse_terms(query)
    return [r for r in items if all(term in searchable_text(r) for term in terms)]
