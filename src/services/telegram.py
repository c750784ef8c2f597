"""Telegram Bot API client - single sendMessage call, no batching."""

import os
from typing import Optional
import httpx
from src.utils.errors import TelegramError
from src.utils.logging import get_structured_logger, mask_chat_id, sanitize_message_text

logger = get_structured_logger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


def get_bot_token() -> str:
    """Get bot token from environment."""
    token = os.environ.get("TELEGRAM_BOT_TOKEN", "").strip()
    if not token:
        raise TelegramError("TELEGRAM_BOT_TOKEN is not set")
    return token


def download_button(url: str, text: str = "Download PDF") -> dict:
    """Inline keyboard with a single URL button."""
    return {"inline_keyboard": [[{"text": text, "url": url}]]}


def build_connect_link(user_id: str, bot_username: str) -> str:
    """Deep link that starts the bot with the user's connection code."""
    return f"https://t.me/{bot_username}?start={user_id}"


async def send_telegram_message(
    chat_id: str,
    text: str,
    parse_mode: Optional[str] = "Markdown",
    reply_markup: Optional[dict] = None,
    disable_preview: Optional[bool] = None,
    client: Optional[httpx.AsyncClient] = None
) -> dict:
    """
    Send a message to one chat.

    parse_mode=None sends plain text. Raises TelegramError with the
    provider's error_code and description on any non-success response.
    """
    url = f"{TELEGRAM_API_BASE}/bot{get_bot_token()}/sendMessage"

    payload: dict = {"chat_id": chat_id, "text": text}
    if parse_mode:
        payload["parse_mode"] = parse_mode
    if reply_markup:
        payload["reply_markup"] = reply_markup
    if disable_preview is not None:
        payload["disable_web_page_preview"] = disable_preview

    try:
        if client is None:
            async with httpx.AsyncClient() as http:
                response = await http.post(url, json=payload)
        else:
            response = await client.post(url, json=payload)
    except httpx.HTTPError as e:
        logger.error(
            "Failed to send Telegram message",
            chat_id=mask_chat_id(chat_id),
            error=type(e).__name__
        )
        raise TelegramError(f"Telegram request failed: {type(e).__name__}")

    try:
        data = response.json()
    except ValueError:
        data = {}

    if not response.is_success or not data.get("ok"):
        error_code = data.get("error_code", response.status_code)
        description = data.get("description", response.reason_phrase)
        logger.error(
            "Telegram API error",
            chat_id=mask_chat_id(chat_id),
            error_code=error_code,
            description=description
        )
        raise TelegramError(
            f"Telegram API error ({error_code}): {description}",
            error_code=error_code,
            description=description
        )

    logger.info(
        "Telegram message sent",
        chat_id=mask_chat_id(chat_id),
        message_preview=sanitize_message_text(text, max_length=100)
    )
    return data
