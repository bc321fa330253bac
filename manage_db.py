#!/usr/bin/env python
"""
Database management for the portal content viewer.

Usage:
    python manage_db.py upgrade [--revision REV]     # Apply migrations (default: head)
    python manage_db.py downgrade --revision REV     # Revert to a revision
    python manage_db.py revision -m MESSAGE          # Autogenerate a migration from the models
    python manage_db.py current                      # Show the applied revision
    python manage_db.py create-tables                # Create tables directly (local SQLite only)
    python manage_db.py seed                         # Data types, sample content types and modules
"""
import argparse
import asyncio
import subprocess
import sys


def run_alembic(args):
    command = [sys.executable, "-m", "alembic"] + args
    print(f"Running: {' '.join(command)}")
    subprocess.run(command, check=True)


async def create_tables():
    # Imported here so alembic commands never load the application models
    from portal.features.core.database import DATABASE_URL, create_tables as create_all

    if not DATABASE_URL.startswith("sqlite"):
        raise SystemExit("create-tables is for local SQLite databases; use 'upgrade' elsewhere.")
    await create_all()


def main():
    parser = argparse.ArgumentParser(description="Portal content viewer database management")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    upgrade_parser = subparsers.add_parser("upgrade", help="Apply migrations")
    upgrade_parser.add_argument("--revision", "-r", default="head", help="Target revision")

    downgrade_parser = subparsers.add_parser("downgrade", help="Revert migrations")
    downgrade_parser.add_argument("--revision", "-r", required=True, help="Target revision")

    revision_parser = subparsers.add_parser("revision", help="Autogenerate a migration")
    revision_parser.add_argument("--message", "-m", required=True, help="Migration message")

    subparsers.add_parser("current", help="Show the applied revision")
    subparsers.add_parser("create-tables", help="Create tables without migrations")
    subparsers.add_parser("seed", help="Seed starter content definitions and modules")

    args = parser.parse_args()

    if args.command == "upgrade":
        run_alembic(["upgrade", args.revision])
    elif args.command == "downgrade":
        run_alembic(["downgrade", args.revision])
    elif args.command == "revision":
        run_alembic(["revision", "--autogenerate", "-m", args.message])
    elif args.command == "current":
        run_alembic(["current"])
    elif args.command == "create-tables":
        asyncio.run(create_tables())
    elif args.command == "seed":
        from seed_dynamic_content import seed
        print("Seeding dynamic content...")
        asyncio.run(seed())
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
