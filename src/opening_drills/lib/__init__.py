"""Shared models, errors, configuration and the python-chess rules oracle."""

from opening_drills.lib.errors import (
    AlignmentMiss,
    IllegalMove,
    MalformedScript,
    NoLinesFound,
    OpeningDrillsError,
    RepertoireNotFound,
)
from opening_drills.lib.models import (
    AnnotatedMove,
    ArrowMark,
    MarkColor,
    Repertoire,
    SchedulingState,
    SquareMark,
    StudyLine,
)
from opening_drills.lib.oracle import ChessRulesOracle
from opening_drills.lib.utils import setup_logging, load_settings, TrainerSettings

__all__ = [
    "AlignmentMiss",
    "IllegalMove",
    "MalformedScript",
    "NoLinesFound",
    "OpeningDrillsError",
    "RepertoireNotFound",
    "AnnotatedMove",
    "ArrowMark",
    "MarkColor",
    "Repertoire",
    "SchedulingState",
    "SquareMark",
    "StudyLine",
    "ChessRulesOracle",
    "setup_logging",
    "load_settings",
    "TrainerSettings",
]
