from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from propgen.core.config import settings  # noqa: E402
from propgen.core.errors import PersistenceFailure  # noqa: E402
from propgen.store.db import Store  # noqa: E402
from propgen.store.identity import create_user, get_user_by_email  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Provision a user who can sign in to the proposal generator.")
    parser.add_argument("email", help="Login email address.")
    parser.add_argument("--password", help="Password (prompted when omitted).")
    parser.add_argument("--db", default=settings.db_path, help="SQLite database path.")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if not password:
        parser.error("password must not be empty")

    store = Store(args.db)
    try:
        if get_user_by_email(store, args.email) is not None:
            parser.error(f"user '{args.email}' already exists")
        user = create_user(store, email=args.email, password=password)
    except PersistenceFailure as exc:
        print(f"Failed to create user: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        store.close()
    print(f"Created user {user.email} ({user.id}) in {args.db}")


if __name__ == "__main__":
    main()
