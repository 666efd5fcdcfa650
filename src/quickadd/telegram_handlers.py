"""Telegram command handlers."""

import logging

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import ContextTypes, ConversationHandler

from .config import load_config
from .core.confirmation import (
    ConfirmationState,
    cancel,
    choose_alternative,
    format_when,
    mark_submitted,
    render_card,
    start_confirmation,
    switch_kind,
    toggle_editing,
    update_field,
)
from .core.models import EVENT, TASK
from .core.temporal import InvalidTimezoneError
from .telegram_format import edit_markdown, send_markdown
from .telegram_states import CaptureStates
from .workflows import parse_selection, submit_capture

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    EVENT: ("title", "location", "notes", "start", "end"),
    TASK: ("title", "location", "notes", "due"),
}
TIME_FIELDS = ("start", "end", "due")


# ============== Card rendering ==============


def card_text(state: ConfirmationState) -> str:
    return "\n".join(render_card(state))


def card_keyboard(state: ConfirmationState) -> InlineKeyboardMarkup | None:
    """Inline buttons for the card, or None once it is closed."""
    if not state.is_open:
        return None

    if state.editing:
        fields = EDITABLE_FIELDS[state.draft.kind]
        return InlineKeyboardMarkup(
            [
                [InlineKeyboardButton(f.capitalize(), callback_data=f"field:{f}") for f in fields],
                [InlineKeyboardButton("Done editing", callback_data="edit")],
            ]
        )

    other = "task" if state.draft.kind == EVENT else "event"
    keyboard = [
        [
            InlineKeyboardButton("Create", callback_data="create"),
            InlineKeyboardButton("Edit", callback_data="edit"),
        ]
    ]
    if state.alternatives:
        keyboard.append(
            [
                InlineKeyboardButton(format_when(alt), callback_data=f"alt:{i}")
                for i, alt in enumerate(state.alternatives)
            ]
        )
    keyboard.append(
        [
            InlineKeyboardButton(f"Make it a {other}", callback_data="kind"),
            InlineKeyboardButton("Cancel", callback_data="cancel"),
        ]
    )
    return InlineKeyboardMarkup(keyboard)


def _clear(context: ContextTypes.DEFAULT_TYPE) -> None:
    for key in ("card", "capture_text", "edit_field"):
        context.user_data.pop(key, None)


# ============== Simple Commands ==============


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(
        "Hi! Send me any text with a date in it and I'll turn it into an event or a task.\n\n"
        "Commands:\n"
        "/event <text> - Capture as an event\n"
        "/task <text> - Capture as a task\n"
        "/cancel - Drop the current capture\n"
        "/help - Show all commands"
    )


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text(
        "*QuickAdd Commands*\n\n"
        "Just send text, e.g. _Lunch with Sam tomorrow at 1pm_\n\n"
        "/event <text> - Force an event\n"
        "/task <text> - Force a task\n"
        "/cancel - Cancel current capture\n",
        parse_mode="Markdown",
    )


# ============== Capture Conversation ==============


async def _start_capture(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    text: str,
    forced_kind: str | None = None,
):
    config = load_config()
    try:
        result = parse_selection(text, config, forced_kind=forced_kind)
    except InvalidTimezoneError as e:
        logger.error(f"Cannot parse capture: {e}")
        await update.message.reply_text(f"Invalid TIMEZONE in quickadd.conf: {e}")
        return ConversationHandler.END

    state = start_confirmation(result)
    context.user_data["capture_text"] = text
    context.user_data["card"] = state
    await send_markdown(update.message, card_text(state), reply_markup=card_keyboard(state))
    return CaptureStates.REVIEWING


async def capture_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle a plain text message - parse it into a confirmation card."""
    text = update.message.text.strip()
    if not text:
        return ConversationHandler.END
    return await _start_capture(update, context, text)


async def event_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /event command."""
    text = " ".join(context.args or []).strip()
    if not text:
        await update.message.reply_text("Usage: /event <text>")
        return ConversationHandler.END
    return await _start_capture(update, context, text, forced_kind=EVENT)


async def task_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /task command."""
    text = " ".join(context.args or []).strip()
    if not text:
        await update.message.reply_text("Usage: /task <text>")
        return ConversationHandler.END
    return await _start_capture(update, context, text, forced_kind=TASK)


async def card_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle a button press on the confirmation card."""
    query = update.callback_query
    await query.answer()

    state: ConfirmationState | None = context.user_data.get("card")
    if state is None or not state.is_open:
        await query.edit_message_text("This capture is no longer active.")
        return ConversationHandler.END

    data = query.data
    if data == "create":
        outcome = submit_capture(state.draft, load_config())
        state = mark_submitted(state, outcome)
        if outcome.ok and outcome.url:
            logger.info(f"Created {outcome.provider.value} item: {outcome.url}")
    elif data == "edit":
        state = toggle_editing(state)
    elif data == "kind":
        other = TASK if state.draft.kind == EVENT else EVENT
        result = parse_selection(context.user_data["capture_text"], load_config(), forced_kind=other)
        state = switch_kind(state, result)
    elif data == "cancel":
        state = cancel(state)
    elif data.startswith("alt:"):
        try:
            state = choose_alternative(state, int(data[4:]))
        except (IndexError, ValueError):
            logger.warning(f"Stale alternative button: {data}")
    elif data.startswith("field:"):
        field = data[6:]
        context.user_data["edit_field"] = field
        hint = " (YYYY-MM-DD HH:MM)" if field in TIME_FIELDS else ""
        await query.edit_message_text(f"Send the new {field}{hint}, or /cancel.")
        return CaptureStates.EDIT_VALUE

    context.user_data["card"] = state
    await edit_markdown(query, card_text(state), reply_markup=card_keyboard(state))

    if not state.is_open:
        _clear(context)
        return ConversationHandler.END
    return CaptureStates.REVIEWING


async def edit_value_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the typed value for the field being edited."""
    state: ConfirmationState | None = context.user_data.get("card")
    field = context.user_data.get("edit_field")
    if state is None or field is None:
        return ConversationHandler.END

    try:
        state = update_field(state, field, update.message.text)
    except ValueError as e:
        await update.message.reply_text(f"Could not update {field}: {e}")
        return CaptureStates.EDIT_VALUE

    context.user_data.pop("edit_field", None)
    context.user_data["card"] = state
    await send_markdown(update.message, card_text(state), reply_markup=card_keyboard(state))
    return CaptureStates.REVIEWING


async def unauthorized_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Reply to users outside TELEGRAM_ALLOWED_USERS."""
    user = update.effective_user
    logger.warning(f"Rejected update from user {user.id if user else 'unknown'}")
    if update.message:
        await update.message.reply_text(
            "This QuickAdd bot is private.\n"
            "If it's yours, add your Telegram user ID to TELEGRAM_ALLOWED_USERS in quickadd.conf"
        )


async def cancel_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Cancel the current capture."""
    state: ConfirmationState | None = context.user_data.get("card")
    _clear(context)
    if state is None or not state.is_open:
        await update.message.reply_text("Nothing to cancel.")
    else:
        await update.message.reply_text("Capture cancelled.")
    return ConversationHandler.END
