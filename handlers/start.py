import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, Message

from errors import StoreError
from keyboards import notifications_keyboard
from utils.messages import STORE_ERROR_TEXT

logger = logging.getLogger(__name__)

router = Router()

HELP_TEXT = (
    "🆘 <b>Habit Tracker</b>\n\n"
    "Commands:\n"
    "/addhabit Name - add a habit\n"
    "/habits - your habits\n"
    "/deletehabit - delete a habit\n"
    "/checkin - check in for today\n"
    "/notifications - turn reminders on or off\n"
    "/summary - this week's progress\n\n"
    "Every evening you get a reminder unless you already checked in, "
    "and every week a summary of your progress."
)


@router.message(CommandStart())
async def start_cmd(message: Message, store):
    try:
        user, created = await store.get_or_create_user(
            message.from_user.id,
            message.from_user.username,
            message.from_user.first_name,
            message.from_user.last_name,
        )
    except StoreError:
        await message.answer(STORE_ERROR_TEXT)
        return

    if created:
        text = "🎉 Welcome! I'll help you build daily habits.\n\nStart with /addhabit"
    else:
        text = "👋 Welcome back!"
    await message.answer(f"{text}\n\n{HELP_TEXT}", parse_mode="HTML")


@router.message(Command("help"))
async def help_cmd(message: Message):
    await message.answer(HELP_TEXT, parse_mode="HTML")


@router.message(Command("notifications"))
async def notifications_cmd(message: Message, store):
    try:
        user = await store.get_user_by_telegram_id(message.from_user.id)
    except StoreError:
        await message.answer(STORE_ERROR_TEXT)
        return
    if not user:
        await message.answer("Please use /start first to register.")
        return

    status = "enabled 🔔" if user.notifications_enabled else "disabled 🔕"
    await message.answer(
        f"Daily reminders are <b>{status}</b>",
        reply_markup=notifications_keyboard(user.notifications_enabled),
        parse_mode="HTML",
    )


@router.callback_query(F.data == "notify:toggle")
async def toggle_notifications(callback: CallbackQuery, store):
    try:
        user = await store.get_user_by_telegram_id(callback.from_user.id)
        if not user:
            await callback.answer("Please use /start first", show_alert=True)
            return

        enabled = not user.notifications_enabled
        await store.set_notifications(user.id, enabled)
    except StoreError:
        await callback.answer(STORE_ERROR_TEXT, show_alert=True)
        return
    logger.info("User %s turned reminders %s", user.telegram_id, "on" if enabled else "off")

    if enabled:
        text = "🔔 Reminders enabled. See you this evening!"
    else:
        text = "🔕 Reminders disabled. You can still /checkin any time."
    await callback.message.edit_text(text, reply_markup=notifications_keyboard(enabled))
    await callback.answer()
