from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from functools import cached_property
from importlib import resources
from pathlib import Path
from typing import Protocol
from zoneinfo import ZoneInfo

from src.utils.logging import get_logger


logger = get_logger(component="collector_tzdb")


@dataclass(frozen=True)
class TimezoneInfo:
    id: str
    alias_of: str | None
    countries: tuple[str, ...]
    utc_offset_minutes: int


@dataclass(frozen=True)
class CountryInfo:
    id: str
    name: str


class TimezoneSource(Protocol):
    def list_all_timezones(self) -> dict[str, TimezoneInfo]: ...

    def lookup_country(self, code: str) -> CountryInfo | None: ...


def _data_lines(content: str) -> list[list[str]]:
    """Non-comment, non-blank lines of a tzdb .tab file, split on tabs."""
    out: list[list[str]] = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        out.append(line.split("\t"))
    return out


def parse_iso3166(content: str) -> dict[str, str]:
    """iso3166.tab -> {country_code: country_name}."""
    return {parts[0]: parts[1] for parts in _data_lines(content) if len(parts) >= 2}


def parse_zone_tab(content: str) -> dict[str, list[str]]:
    """zone.tab / zone1970.tab -> {zone_id: [country_code, ...]} in listed order."""
    out: dict[str, list[str]] = {}
    for parts in _data_lines(content):
        if len(parts) < 3:
            continue
        codes = [c for c in parts[0].split(",") if c]
        out.setdefault(parts[2], []).extend(codes)
    return out


def parse_tzdata_zi(content: str) -> tuple[list[str], dict[str, str]]:
    """
    tzdata.zi -> (zone names, {link name: target}).

    Only `Z` (zone) and `L` (link) lines matter here; rules and continuation
    lines are skipped.
    """
    zones: list[str] = []
    links: dict[str, str] = {}
    for line in content.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == "Z":
            zones.append(parts[1])
        elif len(parts) >= 3 and parts[0] == "L":
            links[parts[2]] = parts[1]
    return zones, links


def standard_offset_minutes(zone_id: str, year: int) -> int:
    """
    Standard (non-DST) UTC offset of a zone in minutes.

    Samples January 1 and July 1 of `year`; the sample not in daylight time
    wins. When both or neither are, the smaller offset is used. Negative
    DST (Europe/Dublin winter) counts as standard time.
    """
    tz = ZoneInfo(zone_id)
    samples = [datetime(year, 1, 1, tzinfo=tz), datetime(year, 7, 1, tzinfo=tz)]
    standard = [dt.utcoffset() for dt in samples if (dt.dst() or timedelta(0)) <= timedelta(0)]
    offsets = standard if len(standard) == 1 else [dt.utcoffset() for dt in samples]
    return int(min(o for o in offsets if o is not None).total_seconds()) // 60


class TzdbSource:
    """
    Reference data read from the IANA tz database files shipped in `tzdata`
    (tzdata.zi, zone1970.tab, zone.tab, iso3166.tab).

    `data_dir` points at a directory holding the same files; used for pinned
    or trimmed datasets.
    """

    def __init__(self, *, year: int | None = None, data_dir: Path | None = None) -> None:
        self._year = int(year) if year is not None else date.today().year
        self._data_dir = data_dir

    def _read(self, name: str) -> str:
        if self._data_dir is not None:
            return (self._data_dir / name).read_text(encoding="utf-8")
        return resources.files("tzdata").joinpath("zoneinfo", name).read_text(encoding="utf-8")

    @cached_property
    def _countries(self) -> dict[str, str]:
        return parse_iso3166(self._read("iso3166.tab"))

    @cached_property
    def _timezones(self) -> dict[str, TimezoneInfo]:
        zones, links = parse_tzdata_zi(self._read("tzdata.zi"))
        zone1970 = parse_zone_tab(self._read("zone1970.tab"))
        zone_tab = parse_zone_tab(self._read("zone.tab"))

        out: dict[str, TimezoneInfo] = {}
        for zone_id in zones:
            out[zone_id] = TimezoneInfo(
                id=zone_id,
                alias_of=None,
                countries=self._zone_countries(zone_id, zone1970, zone_tab),
                utc_offset_minutes=standard_offset_minutes(zone_id, self._year),
            )
        for link_id, target in links.items():
            target_info = out.get(target)
            out[link_id] = TimezoneInfo(
                id=link_id,
                alias_of=target,
                countries=self._zone_countries(link_id, zone1970, zone_tab),
                utc_offset_minutes=target_info.utc_offset_minutes if target_info else 0,
            )

        logger.info("tzdb_loaded", zones=len(zones), links=len(links), year=self._year)
        return out

    @staticmethod
    def _zone_countries(zone_id: str, zone1970: dict[str, list[str]], zone_tab: dict[str, list[str]]) -> tuple[str, ...]:
        codes = list(zone1970.get(zone_id, []))
        for code in zone_tab.get(zone_id, []):
            if code not in codes:
                codes.append(code)
        return tuple(codes)

    def list_all_timezones(self) -> dict[str, TimezoneInfo]:
        return dict(self._timezones)

    def lookup_country(self, code: str) -> CountryInfo | None:
        name = self._countries.get(code)
        if name is None:
            return None
        return CountryInfo(id=code, name=name)
