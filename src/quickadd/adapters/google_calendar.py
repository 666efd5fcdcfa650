"""Google Calendar and Google Tasks API adapters."""

import logging
from datetime import timedelta
from pathlib import Path

from quickadd.core.models import Attendee, Capture, EventCapture, TaskCapture, to_iso
from quickadd.core.providers import CreateResult, ProviderKind

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/tasks",
]


class AuthenticationError(Exception):
    """Raised when Google credentials are missing or unusable."""

    pass


class GoogleCredentials:
    """Loads, refreshes and stores the OAuth token for one Google account."""

    def __init__(self, token_dir: Path | str, client_secret_file: str = ""):
        self.token_dir = Path(token_dir).expanduser()
        self.client_secret_file = client_secret_file
        self._token_path = self.token_dir / "token.json"

    def load(self, force_refresh: bool = False):
        """Load credentials from token.json, refreshing if needed."""
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self._token_path.exists():
            raise AuthenticationError("Google authentication is required. Run 'quickadd auth'.")

        creds = Credentials.from_authorized_user_file(str(self._token_path), SCOPES)

        if (creds.expired or force_refresh) and creds.refresh_token:
            try:
                creds.refresh(Request())
            except Exception as e:
                raise AuthenticationError(f"Failed to refresh Google token: {e}") from e
            self._save(creds)

        return creds

    def authenticate(self) -> bool:
        """Run the OAuth flow. Returns True on success."""
        from google_auth_oauthlib.flow import InstalledAppFlow

        if not self.client_secret_file:
            logger.error("No client secret file configured")
            return False

        secret_path = Path(self.client_secret_file).expanduser()
        if not secret_path.exists():
            logger.error(f"Client secret file not found: {secret_path}")
            return False

        flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), SCOPES)
        creds = flow.run_local_server(port=0)
        self._save(creds)
        return True

    def disconnect(self) -> bool:
        """Forget the stored token. Returns True if one existed."""
        if not self._token_path.exists():
            return False
        self._token_path.unlink()
        return True

    def _save(self, creds) -> None:
        self.token_dir.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        self._token_path.chmod(0o600)


def map_attendees(attendees: tuple[Attendee, ...]) -> list[dict]:
    return [
        {"email": a.email, **({"displayName": a.name} if a.name else {})}
        for a in attendees
    ]


def build_event_body(capture: EventCapture) -> dict:
    """Google Calendar insert payload for an event capture."""
    body: dict = {
        "summary": capture.title,
        "description": capture.notes,
        "location": capture.location,
        "attendees": map_attendees(capture.attendees),
    }
    if capture.source.url.startswith(("http://", "https://")):
        body["source"] = {"url": capture.source.url, "title": capture.source.title or capture.source.url}
    if capture.reminder_minutes is not None:
        body["reminders"] = {
            "useDefault": False,
            "overrides": [{"method": "popup", "minutes": capture.reminder_minutes}],
        }
    if capture.recurrence:
        body["recurrence"] = [capture.recurrence]

    if capture.all_day:
        # All-day end dates are exclusive; the last stated day is included
        end_date = capture.end.date() + timedelta(days=1)
        body["start"] = {"date": capture.start.date().isoformat()}
        body["end"] = {"date": end_date.isoformat()}
    else:
        body["start"] = {"dateTime": to_iso(capture.start), "timeZone": capture.tz}
        body["end"] = {"dateTime": to_iso(capture.end), "timeZone": capture.tz}

    return {k: v for k, v in body.items() if v not in (None, [])}


def build_task_body(capture: TaskCapture) -> dict:
    """Google Tasks insert payload for a task capture."""
    body = {"title": capture.title, "notes": capture.notes}
    if capture.due:
        body["due"] = to_iso(capture.due)
    return {k: v for k, v in body.items() if v is not None}


class _GoogleProvider:
    """Shared service construction and one retry after a rejected token."""

    api: tuple[str, str]

    def __init__(self, credentials: GoogleCredentials):
        self.credentials = credentials

    def _build_service(self, force_refresh: bool = False):
        from googleapiclient.discovery import build

        name, version = self.api
        return build(name, version, credentials=self.credentials.load(force_refresh))

    def _execute(self, call):
        """Run call(service); on a 401, refresh the token and try once more."""
        from googleapiclient.errors import HttpError

        try:
            return call(self._build_service())
        except HttpError as e:
            if e.resp.status != 401:
                raise
            logger.info("Google rejected the access token, refreshing and retrying")
            return call(self._build_service(force_refresh=True))


class GoogleCalendarProvider(_GoogleProvider):
    """
    Creates events in the primary Google Calendar.

    Implements CaptureProvider protocol.
    """

    api = ("calendar", "v3")

    def __init__(self, credentials: GoogleCredentials, calendar_id: str = "primary"):
        super().__init__(credentials)
        self.calendar_id = calendar_id

    def create(self, capture: Capture) -> CreateResult:
        if not isinstance(capture, EventCapture):
            return CreateResult(
                ok=False,
                provider=ProviderKind.GOOGLE_CALENDAR,
                error="Please use a calendar-compatible item",
            )
        body = build_event_body(capture)
        try:
            data = self._execute(
                lambda service: service.events().insert(calendarId=self.calendar_id, body=body).execute()
            )
        except AuthenticationError as e:
            return CreateResult(ok=False, provider=ProviderKind.GOOGLE_CALENDAR, error=str(e))
        except Exception as e:
            logger.warning(f"Google Calendar API error: {e}")
            return CreateResult(
                ok=False,
                provider=ProviderKind.GOOGLE_CALENDAR,
                error=f"Failed to create Google Calendar event: {e}",
            )

        return CreateResult(
            ok=True,
            provider=ProviderKind.GOOGLE_CALENDAR,
            id=data.get("id"),
            url=data.get("htmlLink"),
        )


class GoogleTasksProvider(_GoogleProvider):
    """
    Creates tasks in the default Google Tasks list.

    Implements CaptureProvider protocol.
    """

    api = ("tasks", "v1")

    def __init__(self, credentials: GoogleCredentials, tasklist: str = "@default"):
        super().__init__(credentials)
        self.tasklist = tasklist

    def create(self, capture: Capture) -> CreateResult:
        if not isinstance(capture, TaskCapture):
            return CreateResult(
                ok=False,
                provider=ProviderKind.GOOGLE_TASKS,
                error="Please use a task-compatible item",
            )
        body = build_task_body(capture)
        try:
            data = self._execute(
                lambda service: service.tasks().insert(tasklist=self.tasklist, body=body).execute()
            )
        except AuthenticationError as e:
            return CreateResult(ok=False, provider=ProviderKind.GOOGLE_TASKS, error=str(e))
        except Exception as e:
            logger.warning(f"Google Tasks API error: {e}")
            return CreateResult(
                ok=False,
                provider=ProviderKind.GOOGLE_TASKS,
                error=f"Failed to create Google Task: {e}",
            )

        return CreateResult(
            ok=True,
            provider=ProviderKind.GOOGLE_TASKS,
            id=data.get("id"),
            url=data.get("selfLink"),
        )
