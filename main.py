"""
Seraglio
Discord bot that tracks time spent in voice channels
Records voice sessions in SQLite and answers /leaderboard and /time
"""

import asyncio
import logging
import signal
import sys
import threading

import discord
import uvicorn
from discord.ext import commands
from dotenv import load_dotenv
from fastapi import FastAPI

from controllers.command_controller import CommandController
from controllers.health_controller import HealthController
from controllers.voice_controller import VoiceController
from services.config import BotConfig
from services.database import init_database
from services.duration_aggregator import DurationAggregator
from services.errors import StorageError
from services.session_store import SessionStore
from services.session_tracker import SessionTracker
from services.shutdown_reconciler import ShutdownReconciler
from services.stats_service import StatsService

logger = logging.getLogger("seraglio")


def configure_logging(level: str):
    """Configure logging for the whole process"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_discord_bot(config: BotConfig, tracker: SessionTracker, stats_service: StatsService) -> commands.Bot:
    """Create and configure a new Discord bot instance"""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.voice_states = True
    intents.members = True

    bot = commands.Bot(
        command_prefix=commands.when_mentioned,
        intents=intents,
        application_id=config.application_id,
        description='Seraglio - tracks time spent in voice channels'
    )

    # Listeners must exist before the gateway delivers GUILD_CREATE
    VoiceController(bot, tracker)
    CommandController(bot, stats_service)

    @bot.event
    async def setup_hook():
        """Register application commands globally"""
        synced = await bot.tree.sync()
        logger.info(f"Registered {len(synced)} application commands")

    @bot.event
    async def on_ready():
        """Bot is ready and connected to Discord"""
        logger.info(f"Bot logged in as {bot.user.name} ({bot.user.id})")
        logger.info("Seraglio is ready!")

    return bot


def create_health_app(health_controller: HealthController) -> FastAPI:
    """Create the FastAPI app serving health endpoints"""
    app = FastAPI(
        title="Seraglio Health",
        description="Health check endpoints for the voice tracker"
    )
    app.include_router(health_controller.create_router())
    return app


def run_health_server(app: FastAPI, port: int):
    """Run the health check server (blocking, meant for a daemon thread)"""
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="warning")


async def shutdown(bot: commands.Bot,
                   bot_task: asyncio.Task,
                   tracker: SessionTracker,
                   reconciler: ShutdownReconciler):
    """Graceful shutdown: stop intake, disconnect, then close open sessions"""
    await tracker.stop()
    if not bot.is_closed():
        await bot.close()
    # Collect bot.start's outcome so a late failure is logged, not left unretrieved
    outcome, = await asyncio.gather(bot_task, return_exceptions=True)
    if isinstance(outcome, Exception):
        logger.warning(f"Bot exited with error during shutdown: {outcome}")
    await reconciler.reconcile()
    logger.info("Seraglio shut down")


async def main(config: BotConfig) -> int:
    """Main entry point"""
    if not config.discord_token:
        logger.error("DISCORD_BOT_TOKEN is required")
        return 1

    try:
        session_factory = init_database(config.database_url)
    except StorageError as e:
        logger.critical(str(e))
        return 1

    store = SessionStore(session_factory)
    tracker = SessionTracker(store)
    aggregator = DurationAggregator(store)
    stats_service = StatsService(aggregator, max_entries=config.leaderboard_size)
    reconciler = ShutdownReconciler(store, tracker)

    health_controller = HealthController(tracker, store)
    health_thread = threading.Thread(
        target=run_health_server,
        args=(create_health_app(health_controller), config.port),
        daemon=True
    )
    health_thread.start()
    logger.info(f"Health server listening on port {config.port}")

    bot = create_discord_bot(config, tracker, stats_service)
    health_controller.set_bot(bot)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows: Ctrl-C arrives as KeyboardInterrupt and cancels main()
            logger.debug(f"Signal handler for {sig.name} not supported on this platform")

    logger.info("Starting Seraglio...")
    bot_task = asyncio.create_task(bot.start(config.discord_token))
    stop_task = asyncio.create_task(stop_event.wait())
    exit_code = 0
    try:
        done, _ = await asyncio.wait({bot_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        if bot_task in done:
            if bot_task.exception() is not None:
                logger.error(f"Bot execution error: {bot_task.exception()}")
                exit_code = 1
            else:
                logger.info("Bot execution finished (stopped).")
        else:
            logger.info("Termination signal received, shutting down...")
    finally:
        stop_task.cancel()
        await shutdown(bot, bot_task, tracker, reconciler)

    return exit_code


def run():
    """Console script entry point"""
    load_dotenv()
    config = BotConfig.from_env()
    configure_logging(config.log_level)
    try:
        sys.exit(asyncio.run(main(config)))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
