"""API clients for Lichess study imports."""

from opening_drills.lib.api.lichess import (
    get_lichess_client,
    export_study_pgn,
    StudyManager,
)

__all__ = [
    "get_lichess_client",
    "export_study_pgn",
    "StudyManager",
]
