"""Daily 'update your tasks' reminders over Telegram."""

import asyncio
import random
from datetime import datetime
from typing import Optional
from src.services.supabase_client import get_users_for_reminder
from src.services.telegram import send_telegram_message
from src.utils.config import ReportSettings
from src.utils.logging import get_structured_logger, mask_chat_id

logger = get_structured_logger(__name__)

REMINDER_MESSAGES = [
    "Hey {name}, your tasks are calling you! 📞",
    "{name}, don't make your tasks miss you too much! 😜",
    "Time to update your tasks, {name}! Or the coffee gets it! ☕️😱",
    "{name}, your tasks are like plants. Water them today! 🌱",
    "If you update your tasks, you get a virtual high five, {name}! 🙌",
    "{name}, procrastination level: expert. Let's break the streak! 🚀",
    "Tasks won't update themselves, {name}. Or will they? 🤔",
    "{name}, your tasks are starting to gossip about you... 🗣️",
    "Update your tasks, {name}, and the universe will thank you! 🌌",
    "{name}, your tasks are waiting like puppies at the door! 🐶",
    "Don't let your tasks get lonely, {name}! 🥲",
    "Tasks are like pizza, {name}. Best served fresh! 🍕",
    "{name}, if you update your tasks, you get +10 productivity points! 🏆",
    "{name}, your tasks are sending you good vibes. Send some back! ✨",
]


def build_reminder(name: Optional[str], weekday: str, cleaner: Optional[str], rng: random.Random) -> str:
    message = rng.choice(REMINDER_MESSAGES).replace("{name}", name or "there")
    if cleaner:
        message += f"\n\n🧹 Today is {weekday} - {cleaner} cleaning! Don't forget your tasks! ✨"
    return message


async def send_daily_reminders(
    now: Optional[datetime] = None,
    settings: Optional[ReportSettings] = None,
    rng: Optional[random.Random] = None
) -> dict:
    """
    Nudge every linked user except the excluded managers.

    Sends run concurrently; a failed send is logged and does not stop the rest.
    """
    settings = settings or ReportSettings.from_env()
    now = now or datetime.now(settings.tzinfo)
    rng = rng or random.Random()

    weekday = now.strftime("%A")
    cleaner = settings.cleaning_schedule.get(weekday)
    users = await get_users_for_reminder(settings.reminder_excluded_user_ids)

    async def _send(user: dict) -> bool:
        chat_id = user.get("telegram_chat_id")
        if not chat_id:
            return False
        try:
            await send_telegram_message(str(chat_id), build_reminder(user.get("name"), weekday, cleaner, rng))
            return True
        except Exception as e:
            logger.error(
                "Failed to send reminder",
                chat_id=mask_chat_id(str(chat_id)),
                user_id=user.get("id"),
                error=str(e)
            )
            return False

    results = await asyncio.gather(*(_send(user) for user in users))
    sent = sum(1 for ok in results if ok)

    logger.info(
        "Daily reminders sent",
        users=len(users),
        sent=sent,
        failed=len(users) - sent,
        cleaner=cleaner
    )
    return {"sent": sent, "failed": len(users) - sent, "today_cleaner": cleaner}
