"""
Main entry point for the barbershop booking service.
Serves the HTTP API and, when BOT_TOKEN is set, runs the Telegram booking
wizard in polling mode alongside it.
"""

import asyncio
import sys

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage
from aiohttp import web

from bot import register_handlers
from config import settings
from utils.logging_config import configure_package_loggers, setup_logging
from web import create_app

# Configure logging using centralized configuration
logger = setup_logging(name=__name__, log_file="bot.log", log_dir="logs")
configure_package_loggers()

# Validate configuration
try:
    settings.validate_all_required()
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    sys.exit(1)


async def start_web_server() -> web.AppRunner:
    runner = web.AppRunner(create_app())
    await runner.setup()
    site = web.TCPSite(runner, host=settings.host, port=settings.port)
    await site.start()
    logger.info(f"HTTP API listening on {settings.host}:{settings.port}")
    return runner


async def main() -> None:
    """Main async function to run the service."""
    runner = await start_web_server()
    bot = None

    try:
        if settings.bot_token:
            bot = Bot(token=settings.bot_token)
            dp = Dispatcher(storage=MemoryStorage())
            register_handlers(dp)
            logger.info("Bot is running in polling mode. Press Ctrl+C to stop.")
            await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
        else:
            logger.info("BOT_TOKEN not set, serving the HTTP API only")
            await asyncio.Event().wait()

    except asyncio.CancelledError:
        logger.info("Service cancelled")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        logger.info("Shutting down...")
        await runner.cleanup()

        if bot is not None:
            try:
                await bot.session.close()
                logger.info("Bot session closed")
            except Exception as e:
                logger.error(f"Error closing bot session: {e}", exc_info=True)

        logger.info("Shutdown complete")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
