import json
import os
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import ValidationError

from flashcoach import config
from flashcoach.schemas.flashcards import Flashcard, FlashcardSet, Language, Scenario
from flashcoach.utils.logger import logger


# (event, flashcard_set) with event in {"added", "evicted", "removed"}
Listener = Callable[[str, FlashcardSet], None]


class FlashcardHistory:
    """
    Most-recent-first history of generated flashcard sets, stored as one
    JSON file. Holds at most `capacity` sets; the oldest are evicted.
    Listeners are told about every change.
    """

    def __init__(self, path, capacity: int = config.HISTORY_CAPACITY):
        self.path = Path(path)
        self.capacity = capacity
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    # ---------------------------------------------------------
    # Storage
    # ---------------------------------------------------------
    def _load(self) -> List[FlashcardSet]:
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"[HISTORY] Failed to read {self.path}: {e}")
            return []

        if not isinstance(raw, list):
            logger.error(f"[HISTORY] {self.path} does not hold a list, ignoring it")
            return []

        sets: List[FlashcardSet] = []
        for item in raw:
            try:
                sets.append(FlashcardSet.model_validate(item))
            except ValidationError:
                logger.warning(f"[HISTORY] Skipping unreadable entry: {str(item)[:100]}")
        return sets

    def _save(self, sets: List[FlashcardSet]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [s.model_dump(mode="json", by_alias=True) for s in sets]

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)

    @staticmethod
    def _new_id(sets: List[FlashcardSet]) -> str:
        taken = {s.id for s in sets}
        stamp = int(time.time() * 1000)
        while str(stamp) in taken:
            stamp += 1
        return str(stamp)

    # ---------------------------------------------------------
    # Operations
    # ---------------------------------------------------------
    def all(self) -> List[FlashcardSet]:
        with self._lock:
            return self._load()

    def get(self, set_id: str) -> Optional[FlashcardSet]:
        for flashcard_set in self.all():
            if flashcard_set.id == set_id:
                return flashcard_set
        return None

    def add(
        self,
        title: str,
        flashcards: List[Flashcard],
        language: Language,
        scenario: Scenario,
    ) -> FlashcardSet:
        with self._lock:
            sets = self._load()
            new_set = FlashcardSet(
                id=self._new_id(sets),
                title=title,
                flashcards=flashcards,
                created_at=datetime.now(timezone.utc),
                language=language,
                scenario=scenario,
            )

            sets.insert(0, new_set)
            evicted = sets[self.capacity:]
            del sets[self.capacity:]
            self._save(sets)

        logger.info(f"[HISTORY] Saved set id={new_set.id} title='{title}' ({len(sets)} stored)")
        self._notify("added", new_set)
        for old_set in evicted:
            self._notify("evicted", old_set)
        return new_set

    def remove(self, set_id: str) -> bool:
        with self._lock:
            sets = self._load()
            kept = [s for s in sets if s.id != set_id]
            if len(kept) == len(sets):
                return False
            removed = next(s for s in sets if s.id == set_id)
            self._save(kept)

        logger.info(f"[HISTORY] Removed set id={set_id}")
        self._notify("removed", removed)
        return True

    # ---------------------------------------------------------
    # Change notification
    # ---------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, flashcard_set: FlashcardSet) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, flashcard_set)
            except Exception:
                logger.exception(f"[HISTORY] Listener failed on '{event}'")


# -------------------------------------------------------------------
# Shared instance (FastAPI dependency)
# -------------------------------------------------------------------
_history: Optional[FlashcardHistory] = None


def _log_change(event: str, flashcard_set: FlashcardSet) -> None:
    logger.debug(f"[HISTORY] {event}: id={flashcard_set.id}")


def get_history() -> FlashcardHistory:
    global _history
    if _history is None:
        path = Path(config.DATA_DIR) / config.HISTORY_FILE
        _history = FlashcardHistory(path, capacity=config.HISTORY_CAPACITY)
        _history.subscribe(_log_change)
        logger.info(f"[HISTORY] Using {path}")
    return _history
