from html import escape

from utils.analytics import Tier, focus_habits, top_habits


TIER_EMOJI = {
    Tier.EXCELLENT: "🏆",
    Tier.GREAT: "⭐",
    Tier.GOOD: "👍",
    Tier.FAIR: "📈",
    Tier.LOW: "🎯",
}

TIER_CHEER = {
    Tier.EXCELLENT: "🎉 <b>Excellent!</b> You're crushing your habits!",
    Tier.GREAT: "👍 <b>Good job!</b> Keep up the momentum!",
    Tier.GOOD: "💪 <b>Making progress!</b> Stay consistent!",
    Tier.FAIR: "🌱 <b>Every step counts!</b> Don't give up!",
    Tier.LOW: "🌱 <b>Every step counts!</b> Don't give up!",
}

STORE_ERROR_TEXT = "⚠️ Something went wrong, please try again."


def progress_bar(percentage, width=10):
    filled = min(width, max(0, round(percentage / 100 * width)))
    return "█" * filled + "░" * (width - filled)


def reminder_text(habits, day):
    lines = [
        "🌟 <b>Daily Habit Check-In</b>",
        "",
        f"Time to check in on your habits for {day:%B %d, %Y}!",
        "",
    ]
    for h in habits:
        lines.append(f"📍 <b>{escape(h.name)}</b>")
        if h.description:
            lines.append(f"   <i>{escape(h.description)}</i>")
    lines += ["", "Please answer for each habit:"]
    return "\n".join(lines)


def _habit_lines(stats):
    lines = []
    for h in stats.habits:
        lines.append(f"{TIER_EMOJI[h.tier]} <b>{escape(h.name)}</b>")
        lines.append(f"   ✅ {h.completed_days}/{h.total_days} days ({h.completion_rate:.1f}%)")
        if h.streak > 0:
            lines.append(f"   🔥 {h.streak} day streak")
        lines.append("")
    return lines


def weekly_summary_text(stats, week_label):
    lines = [
        "📊 <b>Weekly Habit Summary</b>",
        f"📅 {week_label}",
        "",
        "🎯 <b>Overall Progress</b>",
        f"{progress_bar(stats.overall_completion)} {stats.overall_completion:.1f}%",
        "",
        "📈 <b>Individual Habits:</b>",
        "",
    ]
    lines += _habit_lines(stats)

    focus = focus_habits(stats)
    top = top_habits(stats)
    if focus or top:
        lines.append("💡 <b>Tips for next week:</b>")
    if focus:
        lines.append("• Focus on: " + ", ".join(escape(h.name) for h in focus))
    if top:
        lines.append("• Keep up the excellent work with: " + ", ".join(escape(h.name) for h in top))

    lines += ["", "Keep building those positive habits! 💪"]
    return "\n".join(lines)


def on_demand_summary_text(stats, week_label):
    lines = ["📊 <b>Weekly Summary</b>", "", f"Week of {week_label}", ""]
    lines += _habit_lines(stats)
    lines += [
        "📈 <b>Overall Progress</b>",
        f"{stats.completed}/{stats.total} total completions ({stats.overall_completion:.1f}%)",
        "",
        TIER_CHEER[stats.overall_tier],
    ]
    return "\n".join(lines)
