"""Shared workflow layer between CLI and Telegram.

parse_selection runs the core parser and the optional enrichment step;
submit_capture routes a capture to a provider, checks history for
duplicates, and records successful submissions.
"""

import logging
from dataclasses import replace
from datetime import datetime

from .adapters.file_history import FileHistoryStore
from .adapters.google_calendar import GoogleCalendarProvider, GoogleCredentials, GoogleTasksProvider
from .adapters.ics_file import IcsFileProvider
from .adapters.llm_enrichment import GeminiEnricher, HuggingFaceEnricher
from .adapters.parsedatetime_recognizer import ParsedatetimeRecognizer
from .config import Config
from .core.builder import CaptureBuilder
from .core.enrichment import merge_enrichment
from .core.history import find_duplicate, history_item_for
from .core.models import Capture, CaptureKind, ParseRequest, ParseResult
from .core.providers import CreateResult, ProviderKind, route_provider
from .ports import CaptureProvider, DateRecognizer, Enricher, HistoryStore

logger = logging.getLogger(__name__)

DUPLICATE_WARNING = "Similar item exists"


def get_recognizer() -> DateRecognizer:
    return ParsedatetimeRecognizer()


def get_enricher(config: Config) -> Enricher | None:
    """The configured LLM enricher, or None when enrichment is off."""
    if not config.ai_parser_enabled:
        return None
    match config.ai_parser_provider:
        case "gemini":
            return GeminiEnricher(config.ai_parser_api_key, timeout=config.ai_parser_timeout)
        case "huggingface":
            return HuggingFaceEnricher(config.ai_parser_api_key, timeout=config.ai_parser_timeout)
        case _:
            return None


def get_history(config: Config) -> HistoryStore:
    return FileHistoryStore(config.history_path())


def get_credentials(config: Config) -> GoogleCredentials:
    return GoogleCredentials(config.token_dir(), config.google_client_secret_file)


def get_provider(kind: ProviderKind, config: Config) -> CaptureProvider:
    """Build the adapter for a provider kind."""
    match kind:
        case ProviderKind.GOOGLE_CALENDAR:
            return GoogleCalendarProvider(get_credentials(config))
        case ProviderKind.GOOGLE_TASKS:
            return GoogleTasksProvider(get_credentials(config))
        case ProviderKind.ICS:
            return IcsFileProvider(config.ics_dir())
    raise ValueError(f"Unknown provider: {kind}")


def parse_selection(
    text: str,
    config: Config,
    *,
    url: str = "",
    page_title: str = "",
    timezone: str | None = None,
    forced_kind: CaptureKind | None = None,
    now: datetime | str | None = None,
    recognizer: DateRecognizer | None = None,
    enricher: Enricher | None = None,
) -> ParseResult:
    """
    Parse a selection with the local parser, then overlay LLM suggestions.

    Raises InvalidTimezoneError for an unknown timezone. Enrichment failures
    never fail the parse.
    """
    request = ParseRequest(
        text=text,
        url=url,
        page_title=page_title,
        timezone=timezone or config.timezone,
        forced_kind=forced_kind,
        now=now,
    )
    builder = CaptureBuilder(recognizer or get_recognizer(), config.defaults())
    result = builder.parse(request)

    enricher = enricher if enricher is not None else get_enricher(config)
    if enricher is None:
        return result

    enrichment = enricher.enhance(request)
    if enrichment is None:
        logger.debug("No enrichment returned, keeping local parse")
        return result

    return ParseResult(
        capture=merge_enrichment(result.capture, enrichment),
        alternatives=result.alternatives,
        warnings=result.warnings,
        diagnostics={**result.diagnostics, "enriched": True},
    )


def submit_capture(
    capture: Capture,
    config: Config,
    *,
    provider: ProviderKind | None = None,
    allow_duplicates: bool = False,
    history: HistoryStore | None = None,
    adapter: CaptureProvider | None = None,
) -> CreateResult:
    """
    Send a capture to its provider and record it in history.

    The requested provider (default: config.provider) is rerouted when it
    cannot accept the capture's kind; the reroute note becomes the result's
    warning.
    """
    requested = provider or ProviderKind(config.provider)
    target, note = route_provider(capture.kind, requested)
    if note:
        logger.info(note)

    if history is None:
        history = get_history(config)
    items = history.read()
    if not allow_duplicates:
        duplicate = find_duplicate(capture, items)
        if duplicate is not None:
            logger.info(f"Skipping duplicate of {duplicate.id}")
            return CreateResult(
                ok=False,
                provider=target,
                id=duplicate.id,
                deduped=True,
                warning=DUPLICATE_WARNING,
            )

    if adapter is None:
        adapter = get_provider(target, config)
    result = adapter.create(capture)

    # A reroute note replaces the warning on success, and fills it on failure.
    if note and (result.ok or not result.warning):
        result = replace(result, warning=note)

    if result.ok:
        history.write([*items, history_item_for(capture, target.value, datetime.now().astimezone())])
    return result
