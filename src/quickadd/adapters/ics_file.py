"""ICS file adapter - writes captures as .ics files."""

import logging
from pathlib import Path

from quickadd.core.ics import capture_to_ics, ics_filename
from quickadd.core.models import Capture
from quickadd.core.providers import CreateResult, ProviderKind

logger = logging.getLogger(__name__)


class IcsFileProvider:
    """
    Exports captures to a directory of .ics files.

    Implements CaptureProvider protocol. Never overwrites an existing file.
    """

    def __init__(self, output_dir: Path | str):
        self.output_dir = Path(output_dir).expanduser()

    def _path_for(self, capture: Capture) -> Path:
        path = self.output_dir / ics_filename(capture.title)
        stem = path.stem
        counter = 1
        while path.exists():
            path = self.output_dir / f"{stem}-{counter}.ics"
            counter += 1
        return path

    def create(self, capture: Capture) -> CreateResult:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self._path_for(capture)
            path.write_text(capture_to_ics(capture), newline="")
        except OSError as e:
            logger.warning(f"Failed to write ICS file: {e}")
            return CreateResult(ok=False, provider=ProviderKind.ICS, error=f"Could not write ICS file: {e}")

        logger.info(f"Wrote {path}")
        return CreateResult(
            ok=True,
            provider=ProviderKind.ICS,
            id=capture.id,
            url=path.resolve().as_uri(),
            warning="Saved ICS file",
        )
