import json
import logging
import os
from datetime import datetime
from typing import Dict, List, Optional

from opening_drills.lib.errors import RepertoireNotFound
from opening_drills.lib.models import Repertoire, StudyLine, utc_now

logger = logging.getLogger("opening_drills")

STORE_VERSION = 1


def _empty_store() -> Dict:
    return {"repertoires": [], "version": STORE_VERSION}


class JsonRepertoireRepository:
    """
    Stores all repertoires in one JSON file.

    Every call reads the file fresh and every change rewrites it, so callers
    never hold shared references to stored objects.
    """

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict:
        if not os.path.exists(self.path):
            return _empty_store()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            data.setdefault("repertoires", [])
            data.setdefault("version", STORE_VERSION)
            return data
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to read repertoire store {self.path}: {e}. Starting empty.")
            return _empty_store()

    def _store(self, data: Dict):
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save repertoire store {self.path}: {e}")

    def list_all(self) -> List[Repertoire]:
        return [Repertoire.from_dict(r) for r in self._load()["repertoires"]]

    def get_by_id(self, repertoire_id: str) -> Optional[Repertoire]:
        for raw in self._load()["repertoires"]:
            if raw.get("id") == repertoire_id:
                return Repertoire.from_dict(raw)
        return None

    def get_line_by_id(self, line_id: str) -> Optional[StudyLine]:
        for repertoire in self.list_all():
            line = repertoire.find_line(line_id)
            if line is not None:
                return line
        return None

    def save(self, repertoire: Repertoire):
        """Insert or replace a repertoire by id."""
        data = self._load()
        raw = repertoire.to_dict()
        for i, existing in enumerate(data["repertoires"]):
            if existing.get("id") == repertoire.id:
                data["repertoires"][i] = raw
                break
        else:
            data["repertoires"].append(raw)
        self._store(data)
        logger.debug(f"Saved repertoire {repertoire.id} ({len(repertoire.lines)} lines).")

    def delete(self, repertoire_id: str) -> bool:
        data = self._load()
        kept = [r for r in data["repertoires"] if r.get("id") != repertoire_id]
        if len(kept) == len(data["repertoires"]):
            return False
        data["repertoires"] = kept
        self._store(data)
        logger.info(f"Deleted repertoire {repertoire_id}.")
        return True

    def _require(self, repertoire_id: str) -> Repertoire:
        repertoire = self.get_by_id(repertoire_id)
        if repertoire is None:
            raise RepertoireNotFound(f"Repertoire not found: {repertoire_id}")
        return repertoire

    def update_line(self, repertoire_id: str, line: StudyLine) -> Repertoire:
        """Replace one line of a repertoire with an updated copy."""
        repertoire = self._require(repertoire_id)
        for i, existing in enumerate(repertoire.lines):
            if existing.id == line.id:
                repertoire.lines[i] = line
                break
        else:
            raise RepertoireNotFound(f"Line {line.id} not found in repertoire {repertoire_id}")
        self.save(repertoire)
        return repertoire

    def list_due(self, repertoire_id: str, now: Optional[datetime] = None) -> List[StudyLine]:
        """Lines whose next review time has passed; empty for an unknown repertoire."""
        repertoire = self.get_by_id(repertoire_id)
        if repertoire is None:
            return []
        now = now or utc_now()
        return [line for line in repertoire.lines if line.scheduling.next_review_time <= now]

    def record_session_outcome(self, repertoire_id: str, correct_count: int, incorrect_count: int,
                               streak_broken: bool, now: Optional[datetime] = None) -> Repertoire:
        """Fold one session's counters into the repertoire statistics."""
        repertoire = self._require(repertoire_id)
        repertoire.last_studied = now or utc_now()
        repertoire.total_reviews += correct_count + incorrect_count
        repertoire.correct_reviews += correct_count

        if streak_broken:
            repertoire.current_streak = 0
        else:
            repertoire.current_streak += correct_count
        repertoire.longest_streak = max(repertoire.longest_streak, repertoire.current_streak)

        self.save(repertoire)
        return repertoire
