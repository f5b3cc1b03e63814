from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup


def answer_data(habit_id, completed):
    return f"answer:{habit_id}:{'yes' if completed else 'no'}"


def parse_answer(data):
    """``answer:12:yes`` -> ``(12, True)``; raises ValueError on anything else."""
    prefix, habit_id, value = data.split(":")
    if prefix != "answer" or value not in ("yes", "no"):
        raise ValueError(f"not an answer callback: {data!r}")
    return int(habit_id), value == "yes"


def checkin_keyboard(habits):
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text=f"✅ {h.name}", callback_data=answer_data(h.id, True)),
                InlineKeyboardButton(text="❌ No", callback_data=answer_data(h.id, False)),
            ]
            for h in habits
        ]
    )


def delete_keyboard(habits):
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text=f"🗑 {i}. {h.name}", callback_data=f"delete:{h.id}")]
            for i, h in enumerate(habits, start=1)
        ]
    )


def notifications_keyboard(enabled):
    text = "🔕 Disable reminders" if enabled else "🔔 Enable reminders"
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text=text, callback_data="notify:toggle")]]
    )
