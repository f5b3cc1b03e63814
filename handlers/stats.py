from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from errors import StoreError
from utils.dates import DateWindow
from utils.messages import STORE_ERROR_TEXT, on_demand_summary_text

router = Router()


@router.message(Command("summary"))
async def summary(message: Message, store, weekly_cycle):
    try:
        user = await store.get_user_by_telegram_id(message.from_user.id)
        if not user:
            await message.answer("Please use /start first to register.")
            return
        stats = await weekly_cycle.on_demand(user.id)
    except StoreError:
        await message.answer(STORE_ERROR_TEXT)
        return

    if stats is None:
        await message.answer("You don't have any habits yet. Use /addhabit")
        return

    label = DateWindow(stats.week_start, stats.week_end).label()
    await message.answer(on_demand_summary_text(stats, label), parse_mode="HTML")
