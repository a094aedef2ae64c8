"""Print a bcrypt hash for use as ADMIN_PASSWORD_HASH."""

import argparse
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.security import BCRYPT_ROUNDS, hash_password


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a bcrypt hash for the admin password")
    parser.add_argument(
        "password",
        nargs="?",
        default=None,
        help="Plain-text password (prompted for when omitted)",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=BCRYPT_ROUNDS,
        help=f"bcrypt cost factor (default: {BCRYPT_ROUNDS})",
    )
    return parser.parse_args(argv)


def prompt_for_password() -> str:
    password = getpass.getpass("Password: ")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        raise SystemExit("Passwords do not match.")
    return password


def main(argv=None) -> int:
    args = parse_args(argv)
    password = args.password if args.password is not None else prompt_for_password()
    if not password:
        print("Error: password must not be empty.", file=sys.stderr)
        return 1

    print(hash_password(password, rounds=args.rounds))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
