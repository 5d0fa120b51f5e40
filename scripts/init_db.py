"""Create the campus_admin tables and the first admin account.

Usage: ``python scripts/init_db.py [--schema PATH] [--no-admin]``. The target
database comes from the settings module picked by ``APP_ENV``; the admin
account is created from ``ADMIN_EMAIL`` / ``ADMIN_PASSWORD`` when both are set
and that email has no account yet.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from config import get_settings_module

from src.campus_admin.campus_admin.database.bootstrap import apply_schema, ensure_admin_user, list_tables

logger = logging.getLogger("campus_admin.init_db")

DEFAULT_SCHEMA = PROJECT_ROOT / "database" / "schema.sql"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply the campus_admin schema to MySQL.")
    parser.add_argument("--schema", type=Path, default=DEFAULT_SCHEMA, help="schema file to apply")
    parser.add_argument("--no-admin", action="store_true", help="skip creating the first admin account")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    if not args.schema.is_file():
        logger.error("Schema file not found: %s", args.schema)
        return 1
    apply_schema(db_config, schema_path=args.schema)
    logger.info("Applied %s to %s (settings=%s)", args.schema.name, target, settings_module)

    if not args.no_admin:
        email = getattr(settings, "ADMIN_EMAIL", None)
        password = getattr(settings, "ADMIN_PASSWORD", None)
        if email and password:
            created = ensure_admin_user(db_config, email=email, password=password)
            logger.info("Admin %s %s", email, "created" if created else "already present")
        else:
            logger.warning("ADMIN_EMAIL/ADMIN_PASSWORD not set, no admin account created")

    logger.info("%s tables in %s", len(list_tables(db_config)), db_config.get("database"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
