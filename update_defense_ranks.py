#!/usr/bin/env python3
"""
Fetch defense rankings from DEFENSE_RANKINGS_SOURCE and persist them.

Usage:
    DEFENSE_RANKINGS_SOURCE=https://example.com/ranks.csv python update_defense_ranks.py

Exits 0 after writing the rankings file, 1 on any failure. The existing
rankings file is left untouched when the refresh fails.
"""
import asyncio
import logging
import sys

from app.config import load_config, log_config_snapshot
from context.errors import ContextError
from context.service import ContextService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("update_defense_ranks")


async def run() -> int:
    config = load_config()
    log_config_snapshot(config)

    if not config.defense_rankings_source:
        logger.error("DEFENSE_RANKINGS_SOURCE is not set; nothing to refresh")
        return 1

    service = ContextService(config)
    try:
        entries = await service.refresh_defense_ranks()
    except ContextError as e:
        logger.error(f"Defense rankings refresh failed: {e}")
        return 1

    logger.info(f"Wrote {len(entries)} defense rankings to {config.defense_rankings_path}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run()))
