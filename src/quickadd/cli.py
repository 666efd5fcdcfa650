"""QuickAdd CLI - turn text into calendar events and tasks."""

import json
import logging
import sys
from pathlib import Path

import click

from .config import PROVIDERS, load_config
from .core.confirmation import render_card, start_confirmation
from .core.ics import capture_to_ics
from .core.providers import ProviderKind
from .core.temporal import InvalidTimezoneError
from .workflows import get_credentials, get_history, parse_selection, submit_capture


def _parse_options(func):
    """Options shared by every command that parses a selection."""
    func = click.option("--now", default=None, help="Reference time (ISO 8601)")(func)
    func = click.option("--kind", type=click.Choice(["event", "task"]), default=None, help="Force the capture kind")(func)
    func = click.option("--tz", default=None, help="IANA timezone (default: TIMEZONE from config)")(func)
    func = click.option("--title", "page_title", default="", help="Title of the source page")(func)
    func = click.option("--url", default="", help="URL the text came from")(func)
    return func


def _parse_or_exit(text, config, url, page_title, tz, kind, now):
    try:
        return parse_selection(
            text,
            config,
            url=url,
            page_title=page_title,
            timezone=tz,
            forced_kind=kind,
            now=now,
        )
    except InvalidTimezoneError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Error: invalid reference time: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="quickadd")
@click.option("--debug", is_flag=True, help="Log parser decisions to stderr")
def main(debug: bool):
    """QuickAdd - capture events and tasks from plain text."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.argument("text")
@_parse_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def parse(text, url, page_title, tz, kind, now, as_json):
    """Parse TEXT and show the suggested capture."""
    config = load_config()
    result = _parse_or_exit(text, config, url, page_title, tz, kind, now)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    for line in render_card(start_confirmation(result)):
        click.echo(line)


@main.command()
@click.argument("text")
@_parse_options
@click.option("--provider", type=click.Choice(PROVIDERS), default=None, help="Where to create the item")
@click.option("--alternative", type=int, default=0, help="Use alternative N instead of the primary suggestion")
@click.option("--allow-duplicates", is_flag=True, help="Create even if a similar item exists")
def add(text, url, page_title, tz, kind, now, provider, alternative, allow_duplicates):
    """Parse TEXT and create it with the configured provider."""
    config = load_config()
    result = _parse_or_exit(text, config, url, page_title, tz, kind, now)

    capture = result.capture
    if alternative:
        alternatives = result.alternatives or ()
        if not 1 <= alternative <= len(alternatives):
            click.echo(f"Error: no alternative {alternative} (found {len(alternatives)})", err=True)
            sys.exit(1)
        capture = alternatives[alternative - 1]

    outcome = submit_capture(
        capture,
        config,
        provider=ProviderKind(provider) if provider else None,
        allow_duplicates=allow_duplicates,
    )

    if outcome.deduped:
        click.echo(f"Error: {outcome.warning} (use --allow-duplicates to create anyway)", err=True)
        sys.exit(1)
    if not outcome.ok:
        click.echo(f"Error: {outcome.error or outcome.warning}", err=True)
        sys.exit(1)

    click.echo(f"✓ {capture.title} ({outcome.provider.value})")
    if outcome.warning:
        click.echo(f"  {outcome.warning}")
    if outcome.url:
        click.echo(f"  {outcome.url}")


@main.command()
@click.argument("text")
@_parse_options
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write to a file instead of stdout")
def export(text, url, page_title, tz, kind, now, output):
    """Parse TEXT and print it as an iCalendar file."""
    config = load_config()
    result = _parse_or_exit(text, config, url, page_title, tz, kind, now)
    ics = capture_to_ics(result.capture)

    if output is None:
        click.echo(ics, nl=False)
        return

    output.write_text(ics, newline="")
    click.echo(f"Saved to {output}")


@main.command()
@click.option("--clear", is_flag=True, help="Forget all recorded captures")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def history(clear: bool, as_json: bool):
    """Show recently created captures."""
    config = load_config()
    store = get_history(config)

    if clear:
        removed = store.clear()
        click.echo(f"Cleared {removed} item(s).")
        return

    items = store.read()
    if as_json:
        click.echo(json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False))
        return

    if not items:
        click.echo("No history yet.")
        return

    for item in reversed(items):
        when = item.start or item.due or "no date"
        click.echo(f"[{item.kind:5}] {item.title} ({when}) -> {item.provider}")


@main.command()
@click.option("--disconnect", is_flag=True, help="Remove the stored Google token")
def auth(disconnect: bool):
    """Authenticate with Google Calendar and Google Tasks."""
    config = load_config()
    credentials = get_credentials(config)

    if disconnect:
        if credentials.disconnect():
            click.echo("Google account disconnected.")
        else:
            click.echo("No Google account connected.")
        return

    if not config.google_client_secret_file:
        click.echo("Error: GOOGLE_CLIENT_SECRET_FILE not set in quickadd.conf", err=True)
        sys.exit(1)

    if credentials.authenticate():
        click.echo(f"✓ Token saved to {credentials.token_dir}")
    else:
        click.echo("Error: authentication failed", err=True)
        sys.exit(1)


@main.command()
def bot():
    """Run the Telegram bot."""
    from .telegram_bot import run_bot

    try:
        run_bot()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
