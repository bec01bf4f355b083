from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.read_api.catalog import load_catalog, search  # noqa: E402
from src.utils.config import load_catalog_config  # noqa: E402
from src.utils.logging import setup_logging  # noqa: E402


def main() -> int:
    setup_logging(level="WARNING", log_file="")
    parser = argparse.ArgumentParser(description="Query the timezone catalog artifact from the shell")
    parser.add_argument("query", nargs="*", help="Search terms (all must match); omit to list everything")
    parser.add_argument("--artifact", type=Path, default=None, help="Catalog JSON path (default: from config)")
    parser.add_argument("--ids", action="store_true", help="Print matching ids only")
    args = parser.parse_args()

    path = args.artifact or load_catalog_config().artifact_path
    results = search(load_catalog(path), " ".join(args.query))

    if args.ids:
        for r in results:
            print(r.id)
    else:
        print(json.dumps([r.model_dump(mode="json") for r in results], indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
