"""
JSON State Repository — Infrastructure adapter for a local JSON file.

Implements StateRepository with whole-file reads and atomic whole-file writes.
"""

import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pydantic

from mnemo.application.validation import humanize_validation_error
from mnemo.domain.errors import PersistenceError
from mnemo.domain.models import AppState
from mnemo.domain.ports import StateRepository

from .schemas import StateModel

logger = logging.getLogger(__name__)


class JsonStateRepository(StateRepository):
    """
    Stores the whole AppState as one JSON document.

    Writes go to a temporary file in the same directory and are moved into
    place, so a crash mid-write leaves the previous file intact.
    """

    def __init__(
        self,
        data_file: Path,
        backup_dir: Path | None = None,
        backup_on_save: bool = False,
    ):
        self.data_file = Path(data_file)
        self.backup_dir = Path(backup_dir) if backup_dir else self.data_file.parent / "backups"
        self.backup_on_save = backup_on_save

    def load(self) -> AppState:
        if not self.data_file.exists():
            logger.info(f"No data file at {self.data_file}; starting empty")
            return AppState()
        return self._parse_file(self.data_file)

    def save(self, state: AppState) -> None:
        payload = StateModel.from_domain(state).to_json()

        if self.backup_on_save and self.data_file.exists():
            self.backup()

        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.data_file.parent, prefix=f".{self.data_file.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.data_file)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Failed to save {self.data_file}: {e}") from e

        logger.debug(f"Saved {len(state.cards)} cards to {self.data_file}")

    def backup(self, destination: Path | None = None) -> Path:
        """
        Copy the data file aside.

        The default name carries a full timestamp so several backups on the
        same day never collide.
        """
        if not self.data_file.exists():
            raise PersistenceError(f"No data file to back up at {self.data_file}")

        if destination is None:
            stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
            destination = self.backup_dir / f"{self.data_file.stem}.backup.{stamp}.json"

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.data_file, destination)
        except OSError as e:
            raise PersistenceError(f"Failed to back up to {destination}: {e}") from e

        logger.info(f"Backed up data to {destination}")
        return destination

    def restore(self, source: Path) -> None:
        """
        Replace the data file with a backup.

        The backup is validated first, and the current file is itself backed
        up before being overwritten.
        """
        source = Path(source)
        if not source.exists():
            raise PersistenceError(f"Backup file does not exist: {source}")

        self._parse_file(source)

        if self.data_file.exists():
            self.backup()

        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, self.data_file)
        except OSError as e:
            raise PersistenceError(f"Failed to restore from {source}: {e}") from e

        logger.info(f"Restored data from {source}")

    def _parse_file(self, path: Path) -> AppState:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to read {path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Malformed JSON in {path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Invalid data structure in {path}: expected an object")

        try:
            return StateModel.model_validate(data).to_domain()
        except pydantic.ValidationError as e:
            raise PersistenceError(f"Invalid data in {path}: {humanize_validation_error(e)}") from e
