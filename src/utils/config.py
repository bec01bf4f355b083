from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import os
import yaml
from dotenv import load_dotenv


DEFAULT_ARTIFACT_PATH = "data/timezones.json"
DEFAULT_FALLBACK_LOCALE = "en"


@dataclass(frozen=True)
class CatalogConfig:
    artifact_path: Path
    fallback_locale: str = DEFAULT_FALLBACK_LOCALE


def _project_root() -> Path:
    # Resolve from this file: .../src/utils/config.py -> project root is 3 parents up.
    return Path(__file__).resolve().parents[2]


def _resolve(p: str | Path) -> Path:
    path = Path(p)
    return path if path.is_absolute() else _project_root() / path


def load_catalog_config(path: str | None = None) -> CatalogConfig:
    """
    Load catalog config from YAML.

    Precedence:
    - explicit `path`
    - env `TZ_CATALOG_CONFIG`
    - project default `config/catalog.yaml` (optional; defaults apply when absent)

    Env `TZ_CATALOG_ARTIFACT` overrides `catalog.artifact_path`.
    """
    load_dotenv()
    explicit = path or os.getenv("TZ_CATALOG_CONFIG")
    cfg_path = Path(explicit) if explicit else _project_root() / "config" / "catalog.yaml"

    cfg: dict[str, Any] = {}
    if explicit or cfg_path.exists():
        cfg = load_yaml(cfg_path)
    catalog = cfg.get("catalog") or {}
    if not isinstance(catalog, dict):
        raise ValueError(f"Invalid catalog section in {cfg_path}: expected a mapping")

    artifact = os.getenv("TZ_CATALOG_ARTIFACT") or catalog.get("artifact_path") or DEFAULT_ARTIFACT_PATH
    fallback_locale = catalog.get("fallback_locale") or DEFAULT_FALLBACK_LOCALE
    if not isinstance(fallback_locale, str):
        raise ValueError(f"Invalid catalog.fallback_locale in {cfg_path}: {fallback_locale!r}")

    return CatalogConfig(
        artifact_path=_resolve(str(artifact)),
        fallback_locale=fallback_locale,
    )


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    return yaml.safe_load(p.read_text(encoding="utf-8")) or {}
