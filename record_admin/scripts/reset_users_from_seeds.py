"""
Reset the users table from a seeds CSV.

WARNING: This will DELETE all rows in `users`, then re-create them from the
provided CSV (columns: name, email). The operation log is kept.

Usage:
  python -m record_admin.scripts.reset_users_from_seeds --users seeds/users.csv
"""
from __future__ import annotations

import argparse
from record_admin.db import close_db, init_db, open_db
from record_admin.logs import LogContext
from record_admin.services.user_svc import seed_load


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--users", required=True)
    ap.add_argument("--db", default=None, help="database path (defaults to RECORD_DB_PATH / config.yaml)")
    args = ap.parse_args(argv)

    conn = open_db(args.db)
    try:
        init_db(conn, seed=False)
        # destructive reset
        conn.execute("DELETE FROM users")

        log = LogContext("RESET_USERS_FROM_SEEDS")
        try:
            res = seed_load(conn, args.users, log)
        except Exception as e:
            log.write(conn, "ERROR", str(e))
            raise
        log.write(conn, "OK")
        print({"message": "ok", **res})
        return res
    finally:
        close_db(conn)


if __name__ == "__main__":
    main()
