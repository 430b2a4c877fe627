"""
Local habit snapshot store.

Keeps a single keyed record holding the whole habit in a JSON document;
dates are written as ISO-8601 strings and parsed back on load.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from myfocus.core.settings import settings
from myfocus.habits.models import Habit

logger = structlog.get_logger(__name__)

STORAGE_KEY = "myFocusHabit"


class HabitStorage:
    """Load/save/clear of the habit record stored under `key`."""
    
    def __init__(self, path, key: str = STORAGE_KEY):
        self.path = Path(path).expanduser()
        self.key = key
    
    @classmethod
    def from_settings(cls) -> "HabitStorage":
        return cls(settings.habit_storage_path)
    
    def _read_document(self) -> dict:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            document = json.load(fh)
        return document if isinstance(document, dict) else {}
    
    def _write_document(self, document: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".habit-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise
    
    def load(self) -> Optional[Habit]:
        """Stored habit, or None when absent or unreadable."""
        try:
            record = self._read_document().get(self.key)
            if record is None:
                return None
            return Habit.model_validate(record)
        except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
            logger.error("Failed to load habit", path=str(self.path), error=str(e))
            return None
    
    def save(self, habit: Habit) -> None:
        try:
            document = self._read_document()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Replacing unreadable habit storage", path=str(self.path), error=str(e))
            document = {}
        document[self.key] = habit.model_dump(mode="json", by_alias=True)
        self._write_document(document)
        logger.debug("Habit saved", habit_id=habit.id, current_day=habit.current_day)
    
    def clear(self) -> None:
        try:
            document = self._read_document()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Clearing unreadable habit storage", path=str(self.path), error=str(e))
            document = {}
        if self.key in document:
            del document[self.key]
            self._write_document(document)
        logger.info("Habit cleared", path=str(self.path))
