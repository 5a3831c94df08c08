"""Error taxonomy for parsing and drilling repertoire lines."""


class OpeningDrillsError(Exception):
    """Base class for all errors raised by opening_drills."""


class MalformedScript(OpeningDrillsError):
    """The rules oracle could not decode a game's move text."""


class AlignmentMiss(OpeningDrillsError):
    """A move could not be located in the annotated move text."""

    def __init__(self, move_index: int, move_text: str):
        super().__init__(f"Move {move_index} ({move_text}) not found in move text")
        self.move_index = move_index
        self.move_text = move_text


class IllegalMove(OpeningDrillsError):
    """A move was rejected by the rules oracle."""

    def __init__(self, move_text: str, fen: str):
        super().__init__(f"Illegal move {move_text!r} in position {fen}")
        self.move_text = move_text
        self.fen = fen


class NoLinesFound(OpeningDrillsError):
    """An import produced no drillable lines."""


class RepertoireNotFound(OpeningDrillsError):
    """A repertoire or line id is unknown to the repository."""
