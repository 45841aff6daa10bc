#!/usr/bin/env python3
"""
Autumn Moderation Bot - Entry Point
===================================

Loads .env, validates configuration and runs the bot until interrupted.

Usage:
    python main.py
"""

import asyncio
import sys

from dotenv import load_dotenv

from autumn.core.config import ConfigValidationError, validate_and_log_config
from autumn.core.database import StorageError
from autumn.core.logger import logger


async def main() -> None:
    """
    Main entry point.

    1. Loads environment configuration
    2. Validates it (exits on missing token / bad URLs)
    3. Starts the bot; the database is initialized in setup_hook
    """
    load_dotenv()

    try:
        config = validate_and_log_config()
    except ConfigValidationError as e:
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    logger.set_webhook(config.error_webhook_url)

    from autumn.bot import AutumnBot

    bot = AutumnBot(config)
    async with bot:
        try:
            await bot.start(config.discord_token)
        except StorageError as e:
            logger.critical(f"Database unavailable: {e}")
            sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (Ctrl+C)")
