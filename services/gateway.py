import logging
from typing import Protocol

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from errors import GatewayError
from keyboards import checkin_keyboard
from utils.dates import DateWindow
from utils.messages import reminder_text, weekly_summary_text

logger = logging.getLogger(__name__)


class MessagingGateway(Protocol):
    async def send_reminder(self, user, habits, day) -> None: ...

    async def send_weekly_summary(self, user, stats) -> None: ...


class TelegramGateway:
    def __init__(self, bot: Bot):
        self.bot = bot

    async def _send(self, chat_id, text, reply_markup=None):
        try:
            await self.bot.send_message(chat_id, text, reply_markup=reply_markup, parse_mode="HTML")
        except TelegramAPIError as e:
            raise GatewayError(f"send to {chat_id} failed: {e}") from e

    async def send_reminder(self, user, habits, day):
        await self._send(user.telegram_id, reminder_text(habits, day), checkin_keyboard(habits))

    async def send_weekly_summary(self, user, stats):
        label = DateWindow(stats.week_start, stats.week_end).label()
        await self._send(user.telegram_id, weekly_summary_text(stats, label))
