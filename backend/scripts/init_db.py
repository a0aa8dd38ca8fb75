"""
Initialize the response cache database: create the cached_responses table.

Usage (from backend directory):
  python -m scripts.init_db

Only needed when config.yaml sets cache.backend to "sqlite". The SQLite store
also creates the table on first use, so running this is optional.
"""

from ai_editor.core.config import get_cache_db_path
from ai_editor.core.database import init_db
from ai_editor.core.logging import get_logger

logger = get_logger()


def main():
    logger.info("Initializing cache database at %s...", get_cache_db_path())
    init_db()
    logger.info(
        "Cache database ready. Run the application with: python -m uvicorn main:app --host 0.0.0.0 --port 3001"
    )


if __name__ == "__main__":
    main()
