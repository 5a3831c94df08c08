"""Data persistence for repertoires and their study lines."""

from opening_drills.lib.data.repository import JsonRepertoireRepository

__all__ = [
    "JsonRepertoireRepository",
]
