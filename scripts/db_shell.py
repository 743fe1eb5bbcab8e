"""
Run a query against the jobs database (DATABASE_URL required).

Usage:
  DATABASE_URL=... python -m scripts.db_shell                    # row counts per table
  DATABASE_URL=... python -m scripts.db_shell "SELECT title, company_name FROM jobs LIMIT 5"
"""
from __future__ import annotations

import sys

from core.database import ALL_TABLES, get_conn


def main() -> None:
    query = " ".join(sys.argv[1:]).strip()
    if not query:
        query = " UNION ALL ".join(
            f"SELECT '{table}' AS name, COUNT(*) AS rows FROM {table}" for table in ALL_TABLES
        )

    try:
        conn = get_conn()
    except RuntimeError as exc:
        raise SystemExit(str(exc)) from exc

    try:
        cur = conn.cursor()
        cur.execute(query)
        if cur.description is not None:
            for row in cur.fetchall():
                print(dict(row))
        else:
            conn.commit()
            print(f"OK ({cur.rowcount} row(s) affected)")
    except Exception as exc:
        raise SystemExit(f"Error running query: {exc}") from exc
    finally:
        conn.close()


if __name__ == "__main__":
    main()
