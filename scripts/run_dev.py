"""
Development server launcher.

Loads the .env file and serves the API with uvicorn, reloading on
source changes unless ``--no-reload`` is given.

Usage:
    python scripts/run_dev.py [--host 0.0.0.0] [--port 8000] [--no-reload]
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load .env file
from dotenv import load_dotenv

load_dotenv()

import uvicorn

from app.core.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the calendar engine API locally")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--no-reload", dest="reload", action="store_false")
    args = parser.parse_args()

    print("=" * 60)
    print(f"{settings.PROJECT_NAME} v{settings.VERSION}")
    print("=" * 60)
    print(f"API:  http://localhost:{args.port}/api/v1")
    print(f"Docs: http://localhost:{args.port}/docs")
    print(f"DB:   {settings.DATABASE_URL.split('@')[-1]}")
    print("=" * 60)

    uvicorn.run("app.main:app", host=args.host, port=args.port, reload=args.reload,
                log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
