import argparse
import sys

from sqlalchemy import inspect

from filemanager.core.config import settings
from filemanager.core.logging_config import setup_logging
from filemanager.db.session import check_connection, engine, init_db

logger = setup_logging("filemanager", settings.LOG_LEVEL)


def show_database_info():
    """Print the database location and its tables"""
    print("\n" + "=" * 60)
    print(" Database Information")
    print("=" * 60)
    db_url = settings.DATABASE_URL
    if db_url.startswith("sqlite"):
        print("Database Type: SQLite")
        print(f"Database File: {db_url.replace('sqlite:///', '')}")
    else:
        print(f"Database URL: {engine.url.render_as_string(hide_password=True)}")
    print(f"Tables: {', '.join(inspect(engine).get_table_names())}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create the file manager tables")
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args(argv)

    print("\n" + "=" * 60)
    print(" Initializing File Manager Database")
    print("=" * 60)

    if not check_connection():
        print("\n Cannot connect to database. Please check DATABASE_URL.")
        return 1

    init_db(drop=args.drop)
    show_database_info()

    print("\nNext steps:")
    print("1. Start server: python -m filemanager.main")
    print(f"2. API Docs: http://localhost:{settings.PORT}/docs")
    return 0


if __name__ == "__main__":
    sys.exit(main())
