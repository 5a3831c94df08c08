import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

import chess

from opening_drills.lib.data.repository import JsonRepertoireRepository
from opening_drills.lib.errors import RepertoireNotFound
from opening_drills.lib.models import Repertoire, StudyLine, utc_now
from opening_drills.lib.oracle import ChessRulesOracle
from opening_drills.study.importer import PGNLineParser, build_repertoire, repertoire_name_from_path
from opening_drills.study.parsers.extractor import LineExtractor
from opening_drills.trainer.session import DrillSessionEngine, DrillSessionState, SessionReport

logger = logging.getLogger("opening_drills")


class RepertoireTrainer:
    """
    Wires the parser, drill engine and scheduler to an injected repository.

    The repository is the only place state is persisted; sessions work on
    private copies and come back here through finish_session().
    """

    def __init__(self, repository: JsonRepertoireRepository,
                 oracle: Optional[ChessRulesOracle] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.repository = repository
        self.oracle = oracle or ChessRulesOracle()
        self.parser = PGNLineParser(LineExtractor(self.oracle))
        self.clock = clock

    def import_pgn(self, pgn_text: str, name: Optional[str] = None) -> Repertoire:
        """Parse and store a new repertoire. Raises NoLinesFound for unusable input."""
        repertoire = build_repertoire(pgn_text, name=name, parser=self.parser, now=self.clock())
        self.repository.save(repertoire)
        logger.info(f"Imported repertoire {repertoire.name!r} with {len(repertoire.lines)} line(s).")
        return repertoire

    def import_file(self, pgn_path: str, name: Optional[str] = None) -> Repertoire:
        text = Path(pgn_path).read_text(encoding="utf-8", errors="replace")
        return self.import_pgn(text, name=name or repertoire_name_from_path(pgn_path))

    def _require(self, repertoire_id: str) -> Repertoire:
        repertoire = self.repository.get_by_id(repertoire_id)
        if repertoire is None:
            raise RepertoireNotFound(f"Repertoire not found: {repertoire_id}")
        return repertoire

    def due_lines(self, repertoire_id: str) -> List[StudyLine]:
        return self.repository.list_due(repertoire_id, self.clock())

    def open_session(self, repertoire_id: str, line_id: Optional[str] = None,
                     user_side: chess.Color = chess.WHITE, auto_play_delay: float = 0.0,
                     on_update: Optional[Callable[[DrillSessionState], None]] = None) -> DrillSessionEngine:
        """
        Start drilling a line; without `line_id` the first due line is used.

        Raises:
            RepertoireNotFound: unknown repertoire or line, or nothing is due.
        """
        repertoire = self._require(repertoire_id)
        if line_id is None:
            due = self.repository.list_due(repertoire_id, self.clock())
            if not due:
                raise RepertoireNotFound(f"No lines due in repertoire {repertoire.name!r}")
            line = due[0]
        else:
            line = repertoire.find_line(line_id)
            if line is None:
                raise RepertoireNotFound(f"Line {line_id} not found in repertoire {repertoire.name!r}")

        engine = DrillSessionEngine(line, user_side=user_side, oracle=self.oracle,
                                    auto_play_delay=auto_play_delay, on_update=on_update)
        engine.begin()
        return engine

    def finish_session(self, repertoire_id: str, engine: DrillSessionEngine) -> SessionReport:
        """Persist the session's line and fold its counters into the repertoire stats."""
        now = self.clock()
        report = engine.report(now)
        self.repository.update_line(repertoire_id, report.line)
        self.repository.record_session_outcome(
            repertoire_id,
            report.correct_count,
            report.incorrect_count,
            report.streak_broken,
            now=now,
        )
        if report.scheduled:
            logger.info(
                f"Line {report.line.id} scored {report.outcome.value}; next review in "
                f"{report.line.scheduling.interval_days} day(s)."
            )
        elif report.faulted:
            logger.warning(f"Line {report.line.id} stopped on an unplayable stored move; schedule unchanged.")
        else:
            logger.info(f"Line {report.line.id} left unfinished; schedule unchanged.")
        return report
