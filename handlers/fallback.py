from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message

# Included last so every other router gets the update first.
router = Router()


@router.message(Command("cancel"))
async def nothing_to_cancel(message: Message):
    await message.answer("There is nothing to cancel. /help lists the commands.")


@router.message(F.text)
async def unknown_text(message: Message):
    await message.answer("🤔 I didn't understand that. Use /help to see what I can do.")
