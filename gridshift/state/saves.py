"""High score persistence: one integer in a small JSON save file."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_SAVE_PATH = Path.home() / ".gridshift" / "save.json"


class HighScoreStore:
    """Reads and writes the best score across runs.

    Missing or corrupt data reads as 0; write failures are logged and the
    game carries on.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self._file_path = Path(path) if path is not None else DEFAULT_SAVE_PATH

    @property
    def path(self) -> Path:
        return self._file_path

    def get_high_score(self) -> int:
        value = self._load().get("high_score", 0)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            logger.warning("Ignoring bad high score %r in %s", value, self._file_path)
            return 0
        return value

    def save_high_score(self, candidate: int) -> bool:
        """Persist candidate only if it beats the stored value."""
        if candidate <= self.get_high_score():
            return False
        data = self._load()
        data["high_score"] = int(candidate)
        return self._save(data)

    def clear(self) -> None:
        try:
            self._file_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not clear save file %s: %s", self._file_path, e)

    def _load(self) -> Dict[str, Any]:
        if not self._file_path.exists():
            return {}
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning("Could not load save from %s: %s", self._file_path, e)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Save file %s is not a mapping; ignoring it", self._file_path)
            return {}
        return payload

    def _save(self, data: Dict[str, Any]) -> bool:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save to %s: %s", self._file_path, e)
            return False
        return True
