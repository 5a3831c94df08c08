"""Annotated PGN repertoires turned into spaced-repetition drills."""

from opening_drills.lib.utils import setup_logging, load_settings, get_project_root

__all__ = [
    "setup_logging",
    "load_settings",
    "get_project_root",
]
