"""Create the database tables and check the plan catalog."""

from __future__ import annotations

import argparse

from sqlalchemy import inspect

from config.settings import CATALOG_PATH, DATABASE_URL
from resumeboost.db.base import create_schema, get_engine
from resumeboost.services.catalog import load_catalog


def migrate(database_url: str) -> list[str]:
    create_schema(database_url)
    return sorted(inspect(get_engine(database_url)).get_table_names())


def main() -> None:
    parser = argparse.ArgumentParser(description="Create database tables for the ResumeBoost backend.")
    parser.add_argument(
        "--database-url",
        dest="database_url",
        default=DATABASE_URL,
        help="SQLAlchemy database URL (default: %(default)s)",
    )
    parser.add_argument(
        "--check-catalog",
        action="store_true",
        help=f"Also load and validate the plan catalog at {CATALOG_PATH}",
    )
    args = parser.parse_args()

    tables = migrate(args.database_url)
    print(f"Database migrated at {args.database_url}: {', '.join(tables)}")

    if args.check_catalog:
        catalog = load_catalog()
        print(
            f"Catalog OK: {len(catalog.plans)} plans, "
            f"{len(catalog.add_ons)} add-ons, {len(catalog.coupons)} coupons"
        )


if __name__ == "__main__":
    main()
