"""Taskminder Telegram Bot."""

import logging

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    MessageHandler,
    filters,
)
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .adapters.telegram_notifier import TelegramNotifier
from .config import Config, load_config, parse_clock_time
from .digest import DigestScheduler
from .reminders import ReminderScheduler
from .telegram_handlers import command_handler, text_handler, voice_handler
from .workflows import Services, build_services

logger = logging.getLogger(__name__)

COMMANDS = ["start", "help", "add", "next", "today", "list", "done", "snooze", "delete"]


def create_application(config: Config | None = None, services: Services | None = None) -> Application:
    """Create and configure the Telegram bot application."""
    if config is None:
        config = services.config if services else load_config()

    if not config.telegram_bot_token:
        raise ValueError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Get a token from @BotFather on Telegram and add it to taskminder.conf"
        )

    if services is None:
        services = build_services(config)
    # Fail at startup, not on the first message, when the LLM key is missing
    logger.info(f"Task extractor: {type(services.extractor).__name__} ({config.extractor})")

    # Build application
    app = Application.builder().token(config.telegram_bot_token).build()
    app.bot_data["services"] = services

    app.add_handler(CommandHandler(COMMANDS, command_handler))
    app.add_handler(MessageHandler(filters.VOICE, voice_handler))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, text_handler))
    # Unknown commands get the usage hint from the command grammar
    app.add_handler(MessageHandler(filters.COMMAND, command_handler))

    return app


def setup_scheduler(app: Application, services: Services) -> AsyncIOScheduler:
    """Set up the reminder scan and the daily digest."""
    config = services.config
    notifier = TelegramNotifier(app.bot)

    reminders = ReminderScheduler(
        services.store,
        notifier,
        services.clock,
        interval_seconds=config.reminder_interval_seconds,
        early_minutes=config.early_reminder_minutes,
    )
    digest = DigestScheduler(services.store, notifier, services.clock, timezone=config.timezone)

    scheduler = AsyncIOScheduler(timezone=config.timezone)

    # A late tick runs late instead of being skipped; a running one makes the next wait
    scheduler.add_job(
        reminders.tick,
        IntervalTrigger(seconds=config.reminder_interval_seconds),
        id="reminder_scan",
        max_instances=2,
        coalesce=True,
        misfire_grace_time=None,
    )
    logger.info(f"Scheduled reminder scan every {config.reminder_interval_seconds}s")

    try:
        hour, minute = parse_clock_time(config.digest_time)
        scheduler.add_job(
            digest.fire,
            CronTrigger(hour=hour, minute=minute),
            id="daily_digest",
            coalesce=True,
            misfire_grace_time=None,
        )
        logger.info(f"Scheduled daily digest at {hour:02d}:{minute:02d} ({config.timezone})")
    except ValueError:
        logger.warning(f"Invalid digest time format: {config.digest_time}")

    return scheduler


def run_bot(debug: bool = False):
    """Run the Telegram bot."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    config = load_config()
    services = build_services(config)
    app = create_application(config, services)
    scheduler = setup_scheduler(app, services)

    async def post_init(application: Application) -> None:
        """Start scheduler after event loop is running."""
        scheduler.start()
        logger.info("Scheduler started")

    app.post_init = post_init

    logger.info(f"Task store: {config.tasks_path}")
    logger.info("Starting Taskminder Telegram bot...")

    # Run bot
    app.run_polling(allowed_updates=Update.ALL_TYPES)
