from __future__ import annotations

import unicodedata
from datetime import date, datetime, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from babel import Locale, UnknownLocaleError
from babel.core import get_global
from babel.dates import NO_INHERITANCE_MARKER
from pydantic import BaseModel, ConfigDict

from src.collector.tzdb import TimezoneSource
from src.utils.logging import get_logger


logger = get_logger(component="transforms_timezones")

DEFAULT_LOCALE = "en"


class TimezoneRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    city: str | None = None
    country_name: str | None = None
    country_code: str | None = None
    utc_offset: str
    abbreviations: tuple[str, ...] = ()


def derive_city(zone_id: str) -> str | None:
    components = zone_id.split("/")
    if components[0] == "Etc":
        return None
    return components[-1].replace("_", " ")


def derive_name(zone_id: str, country_name: str | None) -> str:
    name = " / ".join(component.replace("_", " ") for component in zone_id.split("/"))
    if country_name and country_name.lower() not in name.lower():
        name += f" ({country_name})"
    return name


def format_utc_offset(minutes: int) -> str:
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(int(minutes)), 60)
    return f"{sign}{hours:02d}:{mins:02d}"


def get_locale(country_code: str | None, fallback: str = DEFAULT_LOCALE) -> Locale:
    """Likely locale for a country (`und_<CC>` maximized), else `fallback`."""
    if country_code:
        try:
            return Locale.parse(f"und_{country_code}")
        except (UnknownLocaleError, ValueError) as e:
            logger.debug("locale_fallback", country_code=country_code, fallback=fallback, error=str(e))
    return Locale.parse(fallback)


def cldr_zone_id(zone_id: str, aliases: Iterable[str] = ()) -> str:
    """
    Zone id as CLDR knows it.

    CLDR keeps older names (Asia/Calcutta, America/Godthab...) where tzdb has
    renamed the zone, so a link pointing at `zone_id` may be the one with
    localized names.
    """
    zone_aliases = get_global("zone_aliases")
    meta_zones = get_global("meta_zones")
    for candidate in (zone_id, *sorted(aliases)):
        canonical = zone_aliases.get(candidate, candidate)
        if canonical in meta_zones:
            return canonical
    return zone_aliases.get(zone_id, zone_id)


def short_gmt_format(offset: timedelta, locale: Locale) -> str:
    """Short localized GMT format: `GMT+1`, `UTC-3:30`, bare `GMT` at zero."""
    pattern = locale.zone_formats["gmt"]
    total = int(offset.total_seconds()) // 60
    if total == 0:
        return pattern % ""
    sign = "+" if total > 0 else "-"
    hours, minutes = divmod(abs(total), 60)
    value = f"{sign}{hours}:{minutes:02d}" if minutes else f"{sign}{hours}"
    return pattern % value


def short_zone_name(dt: datetime, cldr_zone: str, locale: Locale) -> str:
    """Zone-specific or metazone short name for `dt`, else the short GMT format."""
    variant = "daylight" if dt.dst() else "standard"
    name = locale.time_zones.get(cldr_zone, {}).get("short", {}).get(variant)
    if not name:
        metazone = get_global("meta_zones").get(cldr_zone)
        if metazone:
            name = locale.meta_zones.get(metazone, {}).get("short", {}).get(variant)
    if name and name != NO_INHERITANCE_MARKER:
        return name
    offset = dt.utcoffset()
    return short_gmt_format(offset if offset is not None else timedelta(0), locale)


def get_abbreviations(
    zone_id: str,
    country_code: str | None,
    *,
    year: int,
    fallback_locale: str = DEFAULT_LOCALE,
    aliases: Iterable[str] = (),
) -> tuple[str, ...]:
    """
    Short zone names seen on the 1st of each month of `year`.

    Twelve fixed samples pick up both standard and daylight names without
    walking the transition table.
    """
    locale = get_locale(country_code, fallback_locale)
    cldr_zone = cldr_zone_id(zone_id, aliases)
    tz = ZoneInfo(zone_id)
    names = {short_zone_name(datetime(year, month, 1, tzinfo=tz), cldr_zone, locale) for month in range(1, 13)}
    return tuple(sorted(n for n in names if n))


# Root collation order of ASCII punctuation and symbols; all of them sort after
# whitespace and before digits and letters.
_ROOT_PUNCTUATION = "_-,;:!?.'\"()[]{}@*/\\&#%`^+<=>|~$"


def _primary_weight(ch: str) -> tuple[int, int]:
    if ch.isspace():
        return 0, 0
    idx = _ROOT_PUNCTUATION.find(ch)
    if idx >= 0:
        return 1, idx
    if not ch.isalnum():
        return 1, len(_ROOT_PUNCTUATION) + ord(ch)
    if ch.isdigit():
        return 2, ord(ch)
    return 3, ord(ch)


def collation_key(name: str) -> tuple:
    """
    Sort key following root collation levels: base characters (punctuation <
    digits < letters), then accents, then case (lower first). The raw name
    breaks any remaining tie.
    """
    primary: list[tuple[int, int]] = []
    secondary: list[str] = []
    tertiary: list[int] = []
    for ch in name:
        decomposed = unicodedata.normalize("NFD", ch)
        base = "".join(c for c in decomposed if not unicodedata.combining(c)) or ch
        primary.extend(_primary_weight(b) for b in base.casefold())
        secondary.append("".join(c for c in decomposed if unicodedata.combining(c)))
        tertiary.append(1 if base.isupper() else 0)
    return tuple(primary), tuple(secondary), tuple(tertiary), name


def transform_timezones(
    source: TimezoneSource,
    *,
    year: int | None = None,
    fallback_locale: str = DEFAULT_LOCALE,
) -> list[TimezoneRecord]:
    """
    Reference tzdb -> catalog records, sorted by display name.

    Aliases are dropped (not redirected) along with ids that have no `/`
    (UTC, GMT, EST5EDT...). They still serve as alternative names when
    looking up localized abbreviations.
    """
    sample_year = int(year) if year is not None else date.today().year
    timezones = source.list_all_timezones()
    links: dict[str, list[str]] = {}
    for link_id, tz in timezones.items():
        if tz.alias_of:
            links.setdefault(tz.alias_of, []).append(link_id)

    records: list[TimezoneRecord] = []
    skipped = 0

    for zone_id, tz in timezones.items():
        if tz.alias_of or "/" not in zone_id:
            skipped += 1
            continue

        country_code = tz.countries[0] if tz.countries else None
        country = source.lookup_country(country_code) if country_code else None

        records.append(
            TimezoneRecord(
                id=zone_id,
                name=derive_name(zone_id, country.name if country else None),
                city=derive_city(zone_id),
                country_name=country.name if country else None,
                country_code=country.id if country else None,
                utc_offset=format_utc_offset(tz.utc_offset_minutes),
                abbreviations=get_abbreviations(
                    zone_id,
                    country_code,
                    year=sample_year,
                    fallback_locale=fallback_locale,
                    aliases=links.get(zone_id, ()),
                ),
            )
        )

    records.sort(key=lambda r: (collation_key(r.name), r.id))
    logger.info("timezones_transformed", records=len(records), skipped=skipped, year=sample_year)
    return records
