import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.types import BotCommand, ErrorEvent

from config import load_settings
from database import create_pool, init_db
from errors import ConfigError
from handlers import fallback, habits, start, stats
from services.cycles import DailyCycle, WeeklyCycle
from services.gateway import TelegramGateway
from services.scheduler import CheckinScheduler, RecurringTrigger
from services.store import EntryStore
from services.tracker import NotificationTracker

logger = logging.getLogger(__name__)


COMMANDS = [
    BotCommand(command="start", description="Start using the habit tracker"),
    BotCommand(command="help", description="Show help information"),
    BotCommand(command="habits", description="View your current habits"),
    BotCommand(command="addhabit", description="Add a new habit to track"),
    BotCommand(command="deletehabit", description="Delete an existing habit"),
    BotCommand(command="checkin", description="Check in on your habits for today"),
    BotCommand(command="notifications", description="Manage daily reminders"),
    BotCommand(command="summary", description="Get your weekly habit summary"),
]


# =========================
# WIRING
# =========================

def build_scheduler(settings, store, gateway, tracker):
    daily = DailyCycle(store, tracker, settings.tz, pacing=settings.daily_pacing_seconds)
    weekly = WeeklyCycle(
        store,
        gateway,
        settings.tz,
        week_start=settings.week_start_index,
        horizon=settings.streak_horizon_days,
        bands=settings.tier_bands,
        pacing=settings.weekly_pacing_seconds,
    )
    scheduler = CheckinScheduler(
        daily,
        weekly,
        daily_trigger=RecurringTrigger(settings.daily_reminder_time, settings.timezone),
        weekly_trigger=RecurringTrigger(
            settings.weekly_summary_time,
            settings.timezone,
            days_of_week=(settings.weekly_summary_day,),
        ),
    )
    return scheduler


def build_dispatcher(settings, store, tracker, weekly_cycle):
    dp = Dispatcher(settings=settings, store=store, tracker=tracker, weekly_cycle=weekly_cycle)
    dp.include_routers(start.router, habits.router, stats.router, fallback.router)

    @dp.errors()
    async def on_error(event: ErrorEvent):
        logger.error("Update handling failed: %s", event.exception, exc_info=event.exception)
        return True

    return dp


# =========================
# STARTUP
# =========================

async def main():
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting habit tracker bot (time zone %s)", settings.timezone)

    pool = await create_pool(settings.database_url)
    bot = Bot(token=settings.bot_token)
    scheduler = None
    try:
        await init_db(pool)

        store = EntryStore(pool)
        gateway = TelegramGateway(bot)
        tracker = NotificationTracker(store, gateway)

        scheduler = build_scheduler(settings, store, gateway, tracker)
        dp = build_dispatcher(settings, store, tracker, scheduler.weekly_cycle)

        await bot.set_my_commands(COMMANDS)
        scheduler.start()

        logger.info("✅ Bot started successfully")
        await dp.start_polling(bot)
    finally:
        if scheduler is not None:
            scheduler.shutdown()
        await bot.session.close()
        await pool.close()
        logger.info("Bot stopped")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass
