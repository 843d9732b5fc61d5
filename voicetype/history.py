import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path

from voicetype.constants import HISTORY_MAX_ENTRIES
from voicetype.models import TranscriptionOutcome

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_PATH = Path(".voicetype_history.json")


@dataclass(frozen=True)
class TranscriptionEntry:
    id: str
    raw_text: str
    polished_text: str
    timestamp: int
    duration: float
    provider: str

    @classmethod
    def from_outcome(cls, outcome: TranscriptionOutcome) -> "TranscriptionEntry":
        return cls(
            id=uuid.uuid4().hex,
            raw_text=outcome.raw_text,
            polished_text=outcome.text,
            timestamp=int(time.time() * 1000),
            duration=outcome.duration,
            provider=outcome.provider.value,
        )


class HistoryStore:
    """Newest-first list of past transcriptions persisted as JSON."""

    def __init__(self, path: Path = DEFAULT_HISTORY_PATH, max_entries: int = HISTORY_MAX_ENTRIES) -> None:
        self._path = path
        self._max = max_entries
        self._entries: list[dict] = []
        self._load()

    def _load(self) -> None:
        match self._path.exists():
            case True:
                try:
                    with open(self._path) as f:
                        raw = json.load(f)
                    self._entries = [e for e in raw if isinstance(e, dict)] if isinstance(raw, list) else []
                except Exception as e:
                    logger.warning("History load failed: %s, starting fresh", e)
            case False:
                pass

    def _save(self) -> None:
        try:
            with open(self._path, "w") as f:
                json.dump(self._entries, f, indent=2)
        except Exception as e:
            logger.warning("History save failed: %s", e)

    def get_all(self) -> list[TranscriptionEntry]:
        entries = []
        for raw in self._entries:
            try:
                entries.append(TranscriptionEntry(**raw))
            except TypeError:
                logger.debug("Skipping malformed history entry")
        return entries

    def save(self, entry: TranscriptionEntry) -> None:
        self._entries.insert(0, asdict(entry))
        self._entries = self._entries[:self._max]
        self._save()

    def record(self, outcome: TranscriptionOutcome) -> TranscriptionEntry:
        entry = TranscriptionEntry.from_outcome(outcome)
        self.save(entry)
        return entry

    def delete(self, entry_id: str) -> None:
        remaining = [e for e in self._entries if e.get("id") != entry_id]
        match len(remaining) != len(self._entries):
            case True:
                self._entries = remaining
                self._save()
            case False:
                pass

    def clear(self) -> None:
        self._entries = []
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("History clear failed: %s", e)
