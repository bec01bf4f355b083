from __future__ import annotations

import json
from pathlib import Path

from src.collector.tzdb import CountryInfo, TimezoneInfo
from src.jobs.build_catalog import run_build_catalog, serialize_catalog
from src.read_api.catalog import load_catalog


class FakeSource:
    def list_all_timezones(self) -> dict[str, TimezoneInfo]:
        return {
            "Europe/Paris": TimezoneInfo(id="Europe/Paris", alias_of=None, countries=("FR",), utc_offset_minutes=60),
            "Etc/GMT+5": TimezoneInfo(id="Etc/GMT+5", alias_of=None, countries=(), utc_offset_minutes=-300),
            "America/New_York": TimezoneInfo(id="America/New_York", alias_of=None, countries=("US",), utc_offset_minutes=-300),
            "EST5EDT": TimezoneInfo(id="EST5EDT", alias_of=None, countries=(), utc_offset_minutes=-300),
        }

    def lookup_country(self, code: str) -> CountryInfo | None:
        names = {"FR": "France", "US": "United States"}
        return CountryInfo(id=code, name=names[code]) if code in names else None


def test_build_catalog_writes_artifact(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "timezones.json"
    records = run_build_catalog(source=FakeSource(), output_path=out, year=2024)

    text = out.read_text(encoding="utf-8")
    assert text.endswith("]\n")
    assert text.startswith('[\n  {\n    "id": "America/New_York",\n')

    payload = json.loads(text)
    assert [r["id"] for r in payload] == ["America/New_York", "Etc/GMT+5", "Europe/Paris"]
    assert len(payload) == len(records)
    assert set(payload[0]) == {"id", "name", "city", "country_name", "country_code", "utc_offset", "abbreviations"}
    # Absent fields are kept as explicit nulls.
    assert payload[1]["city"] is None
    assert payload[1]["country_code"] is None
    assert payload[1]["country_name"] is None


def test_build_catalog_is_deterministic(tmp_path: Path) -> None:
    a = tmp_path / "a.json"
    b = tmp_path / "b.json"
    run_build_catalog(source=FakeSource(), output_path=a, year=2024)
    run_build_catalog(source=FakeSource(), output_path=b, year=2024)
    assert a.read_bytes() == b.read_bytes()


def test_build_catalog_dry_run_writes_nothing(tmp_path: Path) -> None:
    records = run_build_catalog(source=FakeSource(), output_path=None, year=2024)
    assert len(records) == 3
    assert list(tmp_path.iterdir()) == []


def test_built_artifact_loads_back_in_order(tmp_path: Path) -> None:
    out = tmp_path / "timezones.json"
    records = run_build_catalog(source=FakeSource(), output_path=out, year=2024)
    assert list(load_catalog(out)) == records
    assert serialize_catalog(records) == out.read_text(encoding="utf-8")


def test_build_catalog_artifact_is_world_readable(tmp_path: Path) -> None:
    out = tmp_path / "timezones.json"
    run_build_catalog(source=FakeSource(), output_path=out, year=2024)
    assert out.stat().st_mode & 0o777 == 0o644
    assert [p.name for p in tmp_path.iterdir()] == ["timezones.json"]
