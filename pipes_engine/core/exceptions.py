"""Exception hierarchy for puzzle solving and generation."""


class PuzzleError(Exception):
    """Base exception for solver and generator failures."""


class Contradiction(PuzzleError):
    """A solver state that cannot lead to a solution.

    Raised during propagation and consumed by the backtracking search,
    which prunes the guess that led here.
    """


class NoOrientationsPossible(Contradiction):
    """Raised when a cell has no orientation left."""

    def __init__(self, cell):
        super().__init__(f"No orientations possible for tile {cell.initial} at index {cell.index}")
        self.index = cell.index


class LoopDetected(Contradiction):
    """Raised when a proven connection would close a loop."""

    def __init__(self):
        super().__init__("Loop detected")


class IslandDetected(Contradiction):
    """Raised when a connected group is finished while other tiles remain."""

    def __init__(self):
        super().__init__("Island detected")


class InvariantViolation(PuzzleError):
    """Raised when solver and grid disagree, e.g. connecting to an empty cell."""


class GenerationError(PuzzleError):
    """Raised when a puzzle with the requested properties cannot be generated."""
