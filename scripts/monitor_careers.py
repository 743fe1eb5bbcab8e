"""
Check company career pages for new openings.

Usage:
  python -m scripts.monitor_careers --all
  python -m scripts.monitor_careers --top 10
  python -m scripts.monitor_careers "Simform" "Crest Data"
"""
import argparse
import logging
import sys

from core import career_monitor, config
from core.database import init_db


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Monitor company career pages")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--all", action="store_true", help="check every company with a careers URL")
    group.add_argument("--top", type=int, metavar="N", help="check the first N companies")
    parser.add_argument("names", nargs="*", help="company names to check")
    args = parser.parse_args(argv)
    if not (args.all or args.top or args.names):
        parser.error("pass --all, --top N or one or more company names")
    if args.names and (args.all or args.top):
        parser.error("company names cannot be combined with --all/--top")
    return args


def main(argv=None):
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = parse_args(argv)
    init_db()

    if args.names:
        result = career_monitor.monitor_by_names(args.names)
    elif args.top:
        result = career_monitor.monitor_top(args.top)
    else:
        result = career_monitor.monitor_all()

    print(f"\nChecked {result['companies']} companies")
    print(f"Jobs found: {result['total']}  new: {result['new_jobs']}  errors: {result['errors']}")
    for r in result["results"]:
        marker = "✗" if r.get("error") else "✓"
        print(f"  {marker} {r['company']}: {r['jobs_found']} found, {r['new_jobs']} new")
    return 0


if __name__ == "__main__":
    sys.exit(main())
