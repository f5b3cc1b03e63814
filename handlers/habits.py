import logging
from html import escape

from aiogram import F, Router
from aiogram.filters import Command, CommandObject, StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, Message

from errors import HabitNotTrackable, StoreError
from keyboards import checkin_keyboard, delete_keyboard, parse_answer
from utils.dates import reference_date
from utils.messages import STORE_ERROR_TEXT

logger = logging.getLogger(__name__)

router = Router()

MAX_HABIT_NAME = 100


class AddHabit(StatesGroup):
    waiting_for_name = State()


async def _registered(store, message_or_callback):
    user = await store.get_user_by_telegram_id(message_or_callback.from_user.id)
    if not user:
        await message_or_callback.answer("Please use /start first to register.")
    return user


async def _save_habit(message, store, title):
    title = title.strip()
    if not title:
        await message.answer("❗ Habit name is empty, try again or /cancel")
        return False
    if len(title) > MAX_HABIT_NAME:
        await message.answer(f"❗ Please keep the name to {MAX_HABIT_NAME} characters or fewer")
        return False

    try:
        user = await _registered(store, message)
        if not user:
            return True
        habit = await store.create_habit(user.id, title)
    except StoreError:
        await message.answer(STORE_ERROR_TEXT)
        return False
    logger.info("User %s added habit %s", user.telegram_id, habit.id)
    await message.answer(f"✅ Habit «{escape(title)}» added", parse_mode="HTML")
    return True


# -------------------------
# /addhabit — add a habit
# -------------------------
@router.message(Command("addhabit"))
async def add_habit(message: Message, command: CommandObject, state: FSMContext, store):
    if command.args:
        await _save_habit(message, store, command.args)
        return

    await state.set_state(AddHabit.waiting_for_name)
    await message.answer("✏️ Send me the name of the habit. /cancel to stop")


@router.message(Command("cancel"), StateFilter(AddHabit.waiting_for_name))
async def cancel_add(message: Message, state: FSMContext):
    await state.clear()
    await message.answer("❌ Habit creation cancelled")


@router.message(AddHabit.waiting_for_name, F.text, ~F.text.startswith("/"))
async def catch_habit_name(message: Message, state: FSMContext, store):
    if await _save_habit(message, store, message.text):
        await state.clear()


# -------------------------
# /habits — list
# -------------------------
@router.message(Command("habits"))
async def list_habits(message: Message, store):
    try:
        user = await _registered(store, message)
        if not user:
            return
        habits = await store.get_trackable_habits(user.id)
    except StoreError:
        await message.answer(STORE_ERROR_TEXT)
        return

    if not habits:
        await message.answer("You don't have any habits yet. Use /addhabit")
        return

    lines = [f"📋 <b>Your habits</b> ({len(habits)})", ""]
    for i, h in enumerate(habits, start=1):
        lines.append(f"{i}. {escape(h.name)}")
        if h.description:
            lines.append(f"   <i>{escape(h.description)}</i>")
    await message.answer("\n".join(lines), parse_mode="HTML")


# -------------------------
# /deletehabit — soft delete
# -------------------------
@router.message(Command("deletehabit"))
async def delete_habit_cmd(message: Message, store):
    try:
        user = await _registered(store, message)
        if not user:
            return
        habits = await store.get_trackable_habits(user.id)
    except StoreError:
        await message.answer(STORE_ERROR_TEXT)
        return

    if not habits:
        await message.answer("You don't have any habits to delete.")
        return
    await message.answer("🗑 Which habit should I delete?", reply_markup=delete_keyboard(habits))


@router.callback_query(F.data.startswith("delete:"))
async def delete_habit(callback: CallbackQuery, store):
    habit_id = int(callback.data.split(":")[1])
    try:
        user = await _registered(store, callback)
        if not user:
            return
        deleted = await store.deactivate_habit(habit_id, user.id)
    except StoreError:
        await callback.answer(STORE_ERROR_TEXT, show_alert=True)
        return

    if deleted:
        await callback.message.edit_text("🗑 Habit deleted. Its history is kept.")
        await callback.answer("Deleted")
    else:
        await callback.answer("❌ Habit not found", show_alert=True)


# -------------------------
# /checkin — unprompted check-in
# -------------------------
@router.message(Command("checkin"))
async def checkin(message: Message, store, tracker, settings):
    day = reference_date(settings.tz)
    try:
        user = await _registered(store, message)
        if not user:
            return
        statuses = await tracker.today_status(user.id, day)
    except StoreError:
        await message.answer(STORE_ERROR_TEXT)
        return

    if not statuses:
        await message.answer("You don't have any habits to check in for. Use /addhabit")
        return

    done = [s for s in statuses if s.checked_in]
    remaining = [s.habit for s in statuses if not s.checked_in]

    lines = [f"📝 <b>Check-in for {day:%B %d, %Y}</b>", ""]
    for s in done:
        lines.append(f"{'✅' if s.entry.completed else '❌'} {escape(s.habit.name)}")
    if not remaining:
        lines += ["", "🎉 All habits checked in today. No reminder tonight!"]
        await message.answer("\n".join(lines), parse_mode="HTML")
        return

    if done:
        lines.append("")
    lines.append("Remaining habits:")
    lines += [f"• {escape(h.name)}" for h in remaining]
    await message.answer("\n".join(lines), reply_markup=checkin_keyboard(remaining), parse_mode="HTML")


def _recorded_text(habit_id, completed, day, statuses):
    name = next((s.habit.name for s in statuses if s.habit.id == habit_id), "habit")
    verdict = "done ✅" if completed else "not done ❌"
    lines = [
        "📝 <b>Response recorded</b>",
        "",
        f"«{escape(name)}» marked as {verdict} for {day:%B %d, %Y}.",
    ]
    remaining = [s.habit for s in statuses if not s.checked_in]
    if not remaining:
        lines += ["", "🎉 All habits checked in today!"]
        return "\n".join(lines), None

    lines += ["", "Still to check in:"]
    lines += [f"• {escape(h.name)}" for h in remaining]
    return "\n".join(lines), checkin_keyboard(remaining)


# -------------------------
# callback answer:ID:yes|no — from the reminder or /checkin
# -------------------------
@router.callback_query(F.data.startswith("answer:"))
async def answer_callback(callback: CallbackQuery, store, tracker, settings):
    try:
        habit_id, completed = parse_answer(callback.data)
    except ValueError:
        await callback.answer("Unknown action", show_alert=True)
        return

    day = reference_date(settings.tz)
    try:
        user = await _registered(store, callback)
        if not user:
            return
        await tracker.record_response(user.id, habit_id, day, completed)
        statuses = await tracker.today_status(user.id, day)
    except HabitNotTrackable:
        await callback.answer("❌ This habit is no longer tracked", show_alert=True)
        return
    except StoreError:
        await callback.answer(STORE_ERROR_TEXT, show_alert=True)
        return

    await callback.answer("✅ Done!" if completed else "❌ Noted")
    if callback.message is not None:
        text, keyboard = _recorded_text(habit_id, completed, day, statuses)
        await callback.message.edit_text(text, reply_markup=keyboard, parse_mode="HTML")
