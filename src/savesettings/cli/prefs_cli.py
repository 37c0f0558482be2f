"""
Preferences CLI - inspect and delete stored settings entries.

Usage:
    savesettings-prefs [--db <path>] list
    savesettings-prefs [--db <path>] show <key>
    savesettings-prefs [--db <path>] delete <key>
    savesettings-prefs [--db <path>] clear --yes

Without --db the database from SAVESETTINGS_DB_PATH (or the platform
user data directory) is used.
"""
import argparse
import json
import sys
from typing import List, Optional

from savesettings.application.settings.persistence import PreferencesBackend
from savesettings.utils.config import FrameworkConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="savesettings-prefs",
        description="Inspect and delete stored settings entries.",
    )
    parser.add_argument("--db", help="Preferences database file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List stored keys")

    show = subparsers.add_parser("show", help="Print the stored value for a key")
    show.add_argument("key")

    delete = subparsers.add_parser("delete", help="Delete the entry for a key")
    delete.add_argument("key")

    clear = subparsers.add_parser("clear", help="Delete every stored entry")
    clear.add_argument("--yes", action="store_true", help="Confirm deleting everything")

    return parser


def _open_backend(db_path: Optional[str]) -> PreferencesBackend:
    return PreferencesBackend.open(db_path or FrameworkConfig.from_env().resolve_database_path())


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    backend = _open_backend(args.db)

    try:
        if args.command == "list":
            for key in backend.keys():
                print(key)
            return 0

        if args.command == "show":
            raw = backend.get_raw(args.key)
            if raw is None:
                print(f"No entry for '{args.key}'", file=sys.stderr)
                return 1
            try:
                print(json.dumps(json.loads(raw), indent=2, sort_keys=True))
            except json.JSONDecodeError:
                print(raw)
            return 0

        if args.command == "delete":
            if not backend.has_key(args.key):
                print(f"No entry for '{args.key}'", file=sys.stderr)
                return 1
            backend.delete_key(args.key)
            print(f"Deleted '{args.key}'")
            return 0

        if args.command == "clear":
            if not args.yes:
                print("Refusing to delete every entry without --yes", file=sys.stderr)
                return 2
            backend.delete_all()
            print("Deleted all entries")
            return 0
    finally:
        backend.close()

    return 2


if __name__ == "__main__":
    sys.exit(main())
