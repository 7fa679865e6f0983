# File: storage.py
# Path: checkin_queue/core/storage.py

import json
import logging
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Any, List, Union

from pydantic import ValidationError as ModelValidationError

from checkin_queue.core.exceptions import StorageError
from checkin_queue.models.appointment import Appointment, HistoryEntry

logger = logging.getLogger(__name__)


class DailyStore:
    """
    Day-keyed JSON persistence for appointment snapshots and history logs.

    Holds no copy of the data: every call goes straight to disk.
    Reads never raise; a missing or unreadable file means "no data yet".
    Writes raise StorageError.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def snapshot_path(self, day: date) -> Path:
        return self.data_dir / f"appointments_{day.isoformat()}.json"

    def history_path(self, day: date) -> Path:
        return self.data_dir / f"history_{day.isoformat()}.json"

    # ------------------------------------------------------------------
    # Appointment snapshots
    # ------------------------------------------------------------------

    def load_day(self, day: date) -> List[Appointment]:
        """
        Load the appointment snapshot for a day.

        Args:
            day: Calendar date of the snapshot

        Returns:
            Appointments in stored order; empty if the file is absent or unparsable
        """
        records = self._read_list(self.snapshot_path(day))
        appointments = []
        for record in records:
            try:
                appointments.append(Appointment.model_validate(record))
            except ModelValidationError as e:
                logger.warning(f"[Storage] Skipping malformed appointment in {day}: {e.error_count()} error(s)")
        return appointments

    def save_day(self, day: date, appointments: List[Appointment]) -> None:
        """Overwrite the snapshot for a day with the full list."""
        self._write_list(self.snapshot_path(day), [a.to_json() for a in appointments])
        logger.debug(f"[Storage] Saved {len(appointments)} appointment(s) for {day}")

    # ------------------------------------------------------------------
    # History log
    # ------------------------------------------------------------------

    def load_history(self, day: date) -> List[HistoryEntry]:
        entries = []
        for record in self._read_list(self.history_path(day)):
            try:
                entries.append(HistoryEntry.model_validate(record))
            except ModelValidationError as e:
                logger.warning(f"[Storage] Skipping malformed history entry in {day}: {e.error_count()} error(s)")
        return entries

    def append_history(self, day: date, entry: HistoryEntry) -> None:
        """
        Append one entry to a day's history log.

        Read-append-rewrite of the whole file; not transactional. Entries
        already on disk are kept as raw JSON so nothing unparsable is lost.
        """
        path = self.history_path(day)
        history = self._read_list(path)
        history.append(entry.to_json())
        self._write_list(path, history)
        logger.debug(f"[Storage] Appended '{entry.action.value}' history entry for {day}")

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _read_list(self, path: Path) -> List[Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"[Storage] Could not read {path.name}, treating as empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"[Storage] {path.name} does not hold a JSON array, treating as empty")
            return []
        return data

    def _write_list(self, path: Path, data: List[Any]) -> None:
        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.stem}-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except OSError as e:
            logger.error(f"[Storage] Failed to write {path.name}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write {path.name}") from e
