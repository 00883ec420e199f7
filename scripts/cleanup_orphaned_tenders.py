#!/usr/bin/env python
"""
Delete tenders that no active keyword refers to anymore.

A tender is kept while at least one of its tags matches (case-insensitively)
an active keyword of any user. Versions and views are deleted with the tender.
"""

import os
import sys
import json
import logging
import argparse

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.core.database import session_scope
from app.modules.auth import models as auth_models  # noqa: F401
from app.modules.tenders.services import delete_orphaned_tenders

logger = logging.getLogger(__name__)


def write_report(report, path):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, ensure_ascii=False, indent=2)
    logger.info(f"Report written to {path}")


def main(argv=None):
    """Main entry point for the script"""
    parser = argparse.ArgumentParser(description='Delete tenders not matched by any active keyword')
    parser.add_argument('--dry-run', action='store_true', help='Only report orphaned tenders')
    parser.add_argument('--report', help='Write the JSON report to this file')
    args = parser.parse_args(argv)

    with session_scope() as db:
        report = delete_orphaned_tenders(db, dry_run=args.dry_run)

    if args.report:
        write_report(report, args.report)

    action = "Would delete" if args.dry_run else "Deleted"
    print(f"{action} {len(report['orphaned'])} of {report['total_tenders']} tenders "
          f"({report['total_keywords']} active keywords)")
    return report


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    main()
