from enum import Enum
from typing import Callable, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from pipes_engine.algo.cell import Cell
from pipes_engine.algo.components import Components
from pipes_engine.core.exceptions import (
    Contradiction,
    InvariantViolation,
    IslandDetected,
    LoopDetected,
)
from pipes_engine.core.grid import Grid

UNSOLVED = -1
AMBIGUOUS = -2


class SolvingStage(str, Enum):
    """Where a solving step came from."""

    INITIAL = "initial"          # deductions made about the puzzle as given
    GUESS = "guess"              # deductions made after a guess
    AFTERCHECK = "aftercheck"    # steps made after a solution has been found


class Step(NamedTuple):
    """Processing new info on a single cell."""

    index: int
    orientation: int
    final: bool  # true if this orientation is the only one left


class Trial(NamedTuple):
    index: int
    guess: int
    solver: 'Solver'


class AmbiguityReport(NamedTuple):
    marked: List[int]
    solvable: bool
    unique: bool

    @property
    def num_ambiguous(self) -> int:
        return sum(1 for tile in self.marked if tile == AMBIGUOUS)


class Solver:
    """
    Rotation puzzle solver.

    Constraint propagation over a worklist of dirty cells, component
    tracking to rule out loops and islands, and depth-first search over
    guesses when propagation gets stuck. Each guess runs on a clone so
    siblings never share mutable state.
    """

    UNSOLVED = UNSOLVED
    AMBIGUOUS = AMBIGUOUS

    def __init__(self, tiles: Sequence[int], grid: Grid):
        self.tiles = tiles
        self.grid = grid

        self.unsolved: Dict[int, Cell] = {}
        self.components = Components()
        self.solution: List[int] = [UNSOLVED] * grid.total
        self.solutions: List[List[int]] = []
        # insertion ordered set
        self.dirty: Dict[int, None] = {}

        # ruling out orientations connecting only deadends messes up
        # solving very small instances
        self.check_deadend_connections = grid.total > len(grid.DIRECTIONS) + 1

    def get_cell(self, index: int) -> Cell:
        """Returns the cell at index, creating it on first use."""
        cell = self.unsolved.get(index)
        if cell is not None:
            return cell
        cell = Cell(self.grid, index, self.tiles[index])
        self.unsolved[index] = cell
        self.do_local_deductions(index, cell)
        return cell

    def merge_components(self, index: int, neighbour_index: int):
        if index not in self.components:
            raise InvariantViolation(f"Component to merge is undefined for tile {index}")
        if neighbour_index not in self.components:
            self.components.add(neighbour_index)
        if self.components.same(index, neighbour_index):
            raise LoopDetected()

        for other in self.components.union(index, neighbour_index):
            # a joining cell must not connect to anything already in the component
            cell = self.get_cell(other)
            occupied = cell.walls | cell.connections
            forbidden = 0
            for direction in self.grid.DIRECTIONS:
                if occupied & direction:
                    continue
                neighbour, _ = self.grid.find_neighbour(other, direction)
                if self.components.same(index, neighbour):
                    forbidden |= direction
            if forbidden:
                cell.must_have_all_walls(forbidden)
                self.dirty[other] = None

    def do_local_deductions(self, index: int, cell: Cell):
        """Rules out orientations based on immediate neighbours only."""
        if len(cell.possible) == 1:
            # either empty or fully connected, solved right away
            self.dirty[index] = None
            return

        grid = self.grid
        tile_type = grid.tile_type(cell.initial, index)
        possible_before = len(cell.possible)

        neighbour_types = []
        full = grid.fully_connected(index)
        walls = 0
        invalid_directions = 0
        for direction in grid.DIRECTIONS:
            if not full & direction:
                # direction does not exist for this cell
                neighbour_types.append(None)
                invalid_directions |= direction
                continue
            neighbour, empty = grid.find_neighbour(index, direction)
            if empty:
                walls |= direction
                neighbour_types.append(None)
                continue
            neighbour_types.append(grid.tile_type(self.tiles[neighbour], neighbour))

        if walls:
            cell.add_wall(walls)
            cell.must_have_all_walls(walls)
        if invalid_directions:
            cell.must_have_all_walls(invalid_directions)

        if self.check_deadend_connections:
            deadend_connections = 0
            for direction, neighbour_type in zip(grid.DIRECTIONS, neighbour_types):
                if neighbour_type is not None and neighbour_type.is_deadend:
                    deadend_connections |= direction
            cell.must_have_some_walls(deadend_connections)

        grid.extra_deductions(cell, tile_type, neighbour_types)

        if len(cell.possible) < possible_before:
            self.dirty[index] = None

    def process_dirty_cells(self) -> Iterator[Step]:
        """
        Applies constraints to dirty cells until none are left, pushing new
        walls and connections to neighbours. Yields a Step per processed cell.
        """
        grid = self.grid
        while self.dirty:
            index = next(iter(self.dirty))
            cell = self.get_cell(index)
            added_walls, added_connections = cell.apply_constraints()

            if added_connections and index not in self.components:
                self.components.add(index)

            if added_walls:
                for direction in grid.DIRECTIONS:
                    if direction & added_walls:
                        neighbour, empty = grid.find_neighbour(index, direction)
                        if empty:
                            continue
                        self.get_cell(neighbour).add_wall(grid.OPPOSITE[direction])
                        self.dirty[neighbour] = None

            if added_connections:
                for direction in grid.DIRECTIONS:
                    if direction & added_connections:
                        neighbour, empty = grid.find_neighbour(index, direction)
                        if empty:
                            raise InvariantViolation(
                                f"Tile {index} is connecting to an empty neighbour in direction {direction}"
                            )
                        self.get_cell(neighbour).add_connection(grid.OPPOSITE[direction])
                        self.merge_components(index, neighbour)
                        self.dirty[neighbour] = None

            orientation = min(cell.possible)
            final = len(cell.possible) == 1
            if final:
                if index in self.components:
                    left = self.components.discard(index)
                    if left == 0 and len(self.unsolved) > 1:
                        raise IslandDetected()
                self.solution[index] = orientation
                del self.unsolved[index]
            yield Step(index, orientation, final)
            self.dirty.pop(index, None)

    def clone(self) -> 'Solver':
        clone = Solver(self.tiles, self.grid)
        clone.unsolved = {index: cell.clone() for index, cell in self.unsolved.items()}
        clone.components = self.components.copy()
        clone.solution = list(self.solution)
        return clone

    def make_a_guess(self, skip: Optional[Callable[[int], bool]] = None) -> Optional[Tuple[int, int]]:
        """
        Picks the unsolved cell with the fewest options (first one wins ties)
        and commits it to its smallest orientation.
        Returns (index, orientation), or None if every candidate was skipped.
        """
        guess_index = -1
        min_possible = None
        for index, cell in self.unsolved.items():
            if skip is not None and skip(index):
                continue
            if min_possible is None or len(cell.possible) < min_possible:
                guess_index = index
                min_possible = len(cell.possible)
                if min_possible == 2:
                    break
        if min_possible is None:
            return None
        cell = self.unsolved[guess_index]
        orientation = min(cell.possible)
        cell.possible = {orientation}
        self.dirty[guess_index] = None
        return guess_index, orientation

    def _initial_deductions(self) -> Iterator[Step]:
        # empty cells first so borders propagate before other cells are touched
        to_init: Dict[int, None] = {}
        for index in range(self.grid.total):
            if index in self.grid.empty_cells:
                self.dirty[index] = None
            else:
                to_init[index] = None
        while to_init:
            next_tile = next(iter(to_init))
            del to_init[next_tile]
            if next_tile in self.unsolved:
                continue
            self.dirty[next_tile] = None
            for step in self.process_dirty_cells():
                to_init.pop(step.index, None)
                yield step

    @staticmethod
    def _backtrack(trials: List[Trial]):
        index, guess, _ = trials.pop()
        parent = trials[-1].solver
        cell = parent.unsolved.get(index)
        if cell is not None:
            cell.possible.discard(guess)
        parent.dirty[index] = None

    def solve(self, all_solutions: bool = False) -> Iterator[Tuple[SolvingStage, Step]]:
        """
        Solves the puzzle, yielding (stage, step) for every processed cell.
        Stops at the first solution unless all_solutions is set.
        Found solutions are collected in self.solutions.
        """
        if not self.dirty:
            try:
                for step in self._initial_deductions():
                    if step.orientation == 0:
                        # processing an empty cell is not a step
                        continue
                    yield SolvingStage.INITIAL, step
            except Contradiction:
                return

        trials = [Trial(-1, -1, self)]
        while trials:
            solver = trials[-1].solver
            stage = SolvingStage.INITIAL if len(trials) == 1 else SolvingStage.GUESS
            if self.solutions:
                stage = SolvingStage.AFTERCHECK
            try:
                for step in solver.process_dirty_cells():
                    yield stage, step
            except Contradiction:
                # no solution here
                if len(trials) > 1:
                    self._backtrack(trials)
                    continue
                break

            if not solver.unsolved:
                self.solution = solver.solution
                self.solutions.append(list(solver.solution))
                if not all_solutions or len(trials) == 1:
                    break
                self._backtrack(trials)
            else:
                clone = solver.clone()
                index, orientation = clone.make_a_guess()
                trials.append(Trial(index, orientation, clone))

    def mark_ambiguous_tiles(self) -> AmbiguityReport:
        """
        Finds every solution without yielding steps. Tiles that differ
        between solutions are marked AMBIGUOUS, tiles never resolved stay
        UNSOLVED. If the solution is unique then marked == solution.
        """
        marked = list(self.solution)
        unique = True
        if not self.dirty:
            try:
                for step in self._initial_deductions():
                    if step.final:
                        marked[step.index] = step.orientation
            except Contradiction:
                return AmbiguityReport(marked, False, False)

        def is_ambiguous(index: int) -> bool:
            return marked[index] == AMBIGUOUS

        trials = [Trial(-1, -1, self)]
        while trials:
            solver = trials[-1].solver
            try:
                for _ in solver.process_dirty_cells():
                    pass
            except Contradiction:
                if len(trials) > 1:
                    self._backtrack(trials)
                    continue
                break

            if not solver.unsolved:
                for i, tile in enumerate(solver.solution):
                    if marked[i] == UNSOLVED:
                        marked[i] = tile
                    elif marked[i] != AMBIGUOUS and marked[i] != tile:
                        marked[i] = AMBIGUOUS
                        unique = False
                if len(trials) > 1:
                    self._backtrack(trials)
                    continue
                break

            # ambiguous tiles are already known to differ, don't guess them
            clone = solver.clone()
            guess = clone.make_a_guess(skip=is_ambiguous)
            if guess is None:
                # only ambiguous tiles are left, nothing more to learn here
                solver.unsolved = {}
                continue
            trials.append(Trial(guess[0], guess[1], clone))

        solvable = UNSOLVED not in marked
        return AmbiguityReport(marked, solvable, unique)
