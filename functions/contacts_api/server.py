"""
Run the contacts API under uvicorn.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from contacts_api.config import get_settings

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Contacts API server")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind")
    parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes (development)"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    store = "SQL" if settings.database_url and not settings.use_in_memory_backends else "in-memory"
    logger.info(
        "Starting contacts API on %s:%s (%s store, %s mode)",
        args.host,
        args.port,
        store,
        settings.environment,
    )
    uvicorn.run(
        "contacts_api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
