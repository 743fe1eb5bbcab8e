"""
Merge company lists (CSV, JSON or plain text) into companies.json.

Usage:
  python -m scripts.import_companies data/ahmedabad_companies.csv
  python -m scripts.import_companies list.txt --city pune --category product
  python -m scripts.import_companies            # every company file in DATA_DIR
"""
import argparse
import logging
import sys
from pathlib import Path

from core import config
from core.companies import aggregate, find_company_files


def main(argv=None):
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = argparse.ArgumentParser(description="Import company lists into companies.json")
    parser.add_argument("files", nargs="*", type=Path, help="files to import (default: company files in DATA_DIR)")
    parser.add_argument("--city", default="ahmedabad")
    parser.add_argument("--category", default="imported")
    args = parser.parse_args(argv)

    files = args.files or find_company_files()
    missing = [f for f in files if not f.exists()]
    if missing:
        parser.error("file(s) not found: " + ", ".join(str(f) for f in missing))
    if not files:
        print(f"No company files found in {config.DATA_DIR}")
        return 1

    result = aggregate(files, city=args.city, category=args.category)
    print(f"Processed {result['total_processed']} entries from {len(files)} file(s)")
    print(f"  new companies:       {result['new_companies']}")
    print(f"  duplicates skipped:  {result['duplicates_skipped']}")
    print(f"  with careers URL:    {result['companies_with_urls']}")
    print(f"  needing careers URL: {result['companies_needing_urls']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
