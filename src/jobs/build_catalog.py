from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from src.collector.tzdb import TimezoneSource
from src.transforms.timezones import DEFAULT_LOCALE, TimezoneRecord, transform_timezones
from src.utils.logging import get_logger


logger = get_logger(component="jobs_build_catalog")


def serialize_catalog(records: list[TimezoneRecord]) -> str:
    """Artifact text: 2-space indented JSON array, absent fields as null, trailing newline."""
    payload: list[dict[str, Any]] = [r.model_dump(mode="json") for r in records]
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def _write_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
            fh.write(text)
        # mkstemp creates 0600; the read API may run as another user.
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def run_build_catalog(
    *,
    source: TimezoneSource,
    output_path: Path | None,
    year: int | None = None,
    fallback_locale: str = DEFAULT_LOCALE,
) -> list[TimezoneRecord]:
    """
    Build the timezone catalog and write it to `output_path`.

    `output_path=None` builds without writing (dry run).
    """
    records = transform_timezones(source, year=year, fallback_locale=fallback_locale)
    if output_path is None:
        logger.info("catalog_build_dry_run", records=len(records))
        return records

    _write_atomic(Path(output_path), serialize_catalog(records))
    logger.info("catalog_build_complete", records=len(records), output=str(output_path))
    return records
