"""
Provision an account (e.g. the first admin). Run from project root:
  python -m bugtracker.scripts.create_user EMAIL NAME PASSWORD [role]
Example:
  python -m bugtracker.scripts.create_user admin@example.com "Admin" your-secure-password admin
"""
import argparse
import sys

from bugtracker.core.database import SessionLocal
from bugtracker.core.errors import AppError
from bugtracker.services.accounts import register


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a bug tracker account.")
    parser.add_argument("email", help="Email (account identity, must be unique)")
    parser.add_argument("name", help="Display name")
    parser.add_argument("password", help="Password")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        account_id = register(db, args.name, args.email, args.password, role=args.role)
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created account id={account_id} '{args.email}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
