"""QuickAdd Telegram Bot."""

import logging

from telegram import Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ConversationHandler,
    MessageHandler,
    filters,
)

from .config import Config, load_config
from .telegram_handlers import (
    cancel_handler,
    capture_handler,
    card_handler,
    edit_value_handler,
    event_handler,
    help_handler,
    start_handler,
    task_handler,
    unauthorized_handler,
)
from .telegram_states import CaptureStates

logger = logging.getLogger(__name__)


class AllowedUsersFilter(filters.BaseFilter):
    """Passes updates from allow-listed Telegram user IDs; an empty list allows everyone."""

    def __init__(self, allowed_users: list[int]):
        super().__init__(name="AllowedUsersFilter")
        self.allowed_users = frozenset(allowed_users)

    def check_update(self, update: Update) -> bool:
        if not self.allowed_users:
            return True
        user = update.effective_user
        return user is not None and user.id in self.allowed_users


def build_capture_conversation(allowed: filters.BaseFilter) -> ConversationHandler:
    """Capture flow: text -> confirmation card -> create, edit or cancel."""
    return ConversationHandler(
        entry_points=[
            CommandHandler("event", event_handler, filters=allowed),
            CommandHandler("task", task_handler, filters=allowed),
            MessageHandler(filters.TEXT & ~filters.COMMAND & allowed, capture_handler),
        ],
        states={
            CaptureStates.REVIEWING: [CallbackQueryHandler(card_handler)],
            CaptureStates.EDIT_VALUE: [
                MessageHandler(filters.TEXT & ~filters.COMMAND, edit_value_handler),
            ],
        },
        fallbacks=[CommandHandler("cancel", cancel_handler)],
        per_user=True,
        allow_reentry=True,
    )


def create_application(config: Config | None = None) -> Application:
    """Build the bot application. Raises ValueError without a bot token."""
    config = config or load_config()
    if not config.telegram_bot_token:
        raise ValueError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Create a bot with @BotFather and set TELEGRAM_BOT_TOKEN in quickadd.conf"
        )

    app = Application.builder().token(config.telegram_bot_token).build()
    allowed = AllowedUsersFilter(config.telegram_allowed_users)

    for command, handler in (("start", start_handler), ("help", help_handler)):
        app.add_handler(CommandHandler(command, handler, filters=allowed))
    app.add_handler(build_capture_conversation(allowed))

    if config.telegram_allowed_users:
        app.add_handler(MessageHandler(~allowed & filters.ALL, unauthorized_handler))
    return app


def run_bot():
    """Run the Telegram bot until interrupted."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    config = load_config()
    app = create_application(config)

    if not config.telegram_allowed_users:
        logger.warning("TELEGRAM_ALLOWED_USERS is empty - anyone can create captures through this bot")
    logger.info(f"Starting QuickAdd bot (timezone {config.timezone}, provider {config.provider})")
    app.run_polling(allowed_updates=[Update.MESSAGE, Update.CALLBACK_QUERY])
