"""Telegram bot webhook - link a chat to a user through /start <code>."""

from typing import Optional
from src.services.supabase_client import get_user_by_id, update_user_chat_id
from src.services.telegram import send_telegram_message
from src.utils.logging import get_structured_logger, mask_chat_id

logger = get_structured_logger(__name__)

LINKED_MESSAGE = "✅ Success! Your Telegram account is now connected. You will receive notifications here."
INVALID_CODE_MESSAGE = "❌ Error: Invalid connection code. Please generate a new link from your dashboard."
WELCOME_MESSAGE = (
    "👋 Welcome! To connect your account, please click the unique link generated from your dashboard."
)


def extract_start_command(update: dict) -> Optional[tuple[str, str, Optional[str]]]:
    """
    Pull (chat_id, text, connection_code) out of a /start message.

    Returns None for anything that is not a /start command.
    """
    if not isinstance(update, dict):
        return None
    message = update.get("message") or {}
    text = message.get("text")
    chat_id = (message.get("chat") or {}).get("id")
    if not text or chat_id is None:
        return None

    if text.startswith("/start "):
        code = text.split(" ")[1].strip() or None
        return str(chat_id), text, code
    if text == "/start":
        return str(chat_id), text, None
    return None


async def handle_telegram_update(update: dict) -> Optional[str]:
    """
    Process one update; returns the reply sent, if any.

    Failures are logged and swallowed so the webhook always acknowledges.
    """
    command = extract_start_command(update)
    if command is None:
        return None

    chat_id, _, code = command
    try:
        if code is None:
            reply = WELCOME_MESSAGE
        elif await get_user_by_id(code):
            await update_user_chat_id(code, chat_id)
            logger.info("Telegram chat linked", chat_id=mask_chat_id(chat_id), user_id=code)
            reply = LINKED_MESSAGE
        else:
            logger.warning("Invalid Telegram connection code", chat_id=mask_chat_id(chat_id))
            reply = INVALID_CODE_MESSAGE

        await send_telegram_message(chat_id, reply)
        return reply
    except Exception as e:
        logger.error(
            "Telegram webhook error",
            chat_id=mask_chat_id(chat_id),
            error=str(e),
            exc_info=True
        )
        return None
