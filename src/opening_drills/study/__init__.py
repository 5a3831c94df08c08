"""PGN study import."""

from opening_drills.study.importer import PGNLineParser, build_repertoire, repertoire_name_from_path

__all__ = [
    "PGNLineParser",
    "build_repertoire",
    "repertoire_name_from_path",
]
