"""
Database initialization script.

Creates every calendar engine table from the model metadata.  Managed
databases should be migrated with ``alembic upgrade head`` instead.

Usage:
    python scripts/init_db.py [--drop]
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

from app.db.init_db import init_db

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the calendar engine tables")
    parser.add_argument("--drop", action="store_true", help="Drop existing engine tables first (destroys data)")
    args = parser.parse_args()

    print("=" * 50)
    print("Calendar engine database initialization")
    print("=" * 50)

    try:
        init_db(drop_first=args.drop)
    except Exception as e:
        print(f"ERROR: Database initialization failed: {e}")
        sys.exit(1)

    print("SUCCESS: Database initialized")
    sys.exit(0)
