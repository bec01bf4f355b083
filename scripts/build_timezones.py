from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    # When running as scripts/build_timezones.py, sys.path[0] is scripts/,
    # so `import src.*` fails unless the project root is on sys.path.
    sys.path.insert(0, str(PROJECT_ROOT))

from src.collector.tzdb import TzdbSource  # noqa: E402
from src.jobs.build_catalog import run_build_catalog  # noqa: E402
from src.utils.config import load_catalog_config  # noqa: E402
from src.utils.logging import setup_logging  # noqa: E402


def main() -> int:
    setup_logging()
    cfg = load_catalog_config()
    parser = argparse.ArgumentParser(description="Build the static timezone catalog artifact")
    parser.add_argument("--output", type=Path, default=cfg.artifact_path, help=f"Output JSON path (default: {cfg.artifact_path})")
    parser.add_argument("--year", type=int, default=None, help="Year sampled for offsets and abbreviations (default: current year)")
    parser.add_argument("--tzdata-dir", type=Path, default=None, help="Read tzdb files from this directory instead of the tzdata package")
    parser.add_argument("--dry-run", action="store_true", help="Build and report the count without writing")
    args = parser.parse_args()

    year = args.year if args.year is not None else date.today().year
    source = TzdbSource(year=year, data_dir=args.tzdata_dir)
    records = run_build_catalog(
        source=source,
        output_path=None if args.dry_run else args.output,
        year=year,
        fallback_locale=cfg.fallback_locale,
    )
    print(f"Generated {len(records)} timezone entries")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
