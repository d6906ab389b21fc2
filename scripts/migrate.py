"""Script to upgrade, downgrade or extend the staff database schema."""

import argparse
import sys

from alembic import command
from alembic.config import Config


def _alembic_config() -> Config:
    # env.py connects through app.database, which reads DATABASE_URL
    return Config("alembic.ini")


def upgrade(revision: str = "head") -> None:
    """Upgrade the staff tables to a revision, the latest by default."""
    try:
        print(f"Upgrading staff tables to {revision}...")
        command.upgrade(_alembic_config(), revision)
        print("✓ Staff tables are up to date")
    except Exception as e:
        print(f"✗ Upgrade failed: {e}", file=sys.stderr)
        sys.exit(1)


def downgrade(revision: str) -> None:
    """Roll the staff tables back to a revision."""
    try:
        print(f"Downgrading staff tables to {revision}...")
        command.downgrade(_alembic_config(), revision)
        print("✓ Downgrade completed")
    except Exception as e:
        print(f"✗ Downgrade failed: {e}", file=sys.stderr)
        sys.exit(1)


def create_revision(message: str) -> None:
    """Autogenerate a revision from the model tables."""
    try:
        print(f"Creating revision: {message}")
        command.revision(_alembic_config(), message=message, autogenerate=True)
        print("✓ Revision created")
    except Exception as e:
        print(f"✗ Revision failed: {e}", file=sys.stderr)
        sys.exit(1)


def main() -> None:
    """Dispatch the migration sub-command."""
    parser = argparse.ArgumentParser(description=__doc__)
    subcommands = parser.add_subparsers(dest="action")

    up = subcommands.add_parser("upgrade", help="Upgrade the schema (default)")
    up.add_argument("revision", nargs="?", default="head")

    down = subcommands.add_parser("downgrade", help="Roll the schema back")
    down.add_argument("revision")

    create = subcommands.add_parser("create", help="Autogenerate a revision")
    create.add_argument("message", nargs="+")

    args = parser.parse_args()

    if args.action == "downgrade":
        downgrade(args.revision)
    elif args.action == "create":
        create_revision(" ".join(args.message))
    else:
        upgrade(getattr(args, "revision", "head"))


if __name__ == "__main__":
    main()
