#!/usr/bin/env python3
"""
Reset database script for local development.
This script will drop the store table and recreate it, wiping the profile.
"""

import os
import sys
from pathlib import Path

# Add the src directory to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Set default environment variables for local development
os.environ.setdefault("DATABASE_URL", "sqlite:///./local_dev.db")
os.environ.setdefault("FF_REPLICATION", "false")

from sqlalchemy import inspect

from lifehub.db import repo
from lifehub.db.models import Base


def reset_database() -> None:
    """Reset the database by dropping all tables and recreating them."""
    print("🔄 Resetting database...")

    repo.init_db()

    engine = repo._engine
    if not engine:
        print("❌ Failed to initialize database engine")
        return

    print("🗑️  Dropping all tables...")
    Base.metadata.drop_all(engine)

    print("🏗️  Creating tables from models...")
    Base.metadata.create_all(engine)

    print("✅ Database reset complete!")
    print("📊 Tables created:")
    for table in inspect(engine).get_table_names():
        print(f"   - {table}")

    repo.close_db()


if __name__ == "__main__":
    reset_database()
