"""Telegram message formatting utilities."""

import telegramify_markdown

MESSAGE_LIMIT = 4000


def to_markdown_v2(text: str) -> str:
    """Convert plain markdown to Telegram MarkdownV2."""
    return telegramify_markdown.markdownify(text)


async def send_markdown(bot_or_msg, text: str, *, chat_id: int | None = None, reply_markup=None):
    """Send markdown text to Telegram, converting to MarkdownV2.

    bot_or_msg: a Bot instance (pass chat_id) or an Update.message (calls reply_text).
    The reply markup is attached to the last chunk only.
    """
    converted = to_markdown_v2(text)
    chunks = [converted[i : i + MESSAGE_LIMIT] for i in range(0, len(converted), MESSAGE_LIMIT)]
    for n, chunk in enumerate(chunks):
        markup = reply_markup if n == len(chunks) - 1 else None
        if chat_id is not None:
            await bot_or_msg.send_message(chat_id=chat_id, text=chunk, parse_mode="MarkdownV2", reply_markup=markup)
        else:
            await bot_or_msg.reply_text(chunk, parse_mode="MarkdownV2", reply_markup=markup)


async def edit_markdown(query, text: str, *, reply_markup=None):
    """Replace a callback query's message with markdown text."""
    await query.edit_message_text(
        to_markdown_v2(text)[:MESSAGE_LIMIT],
        parse_mode="MarkdownV2",
        reply_markup=reply_markup,
    )
